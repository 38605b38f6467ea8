"""
Heuristic relation suggestions.

Scans entities pairwise and proposes plausible relations from their
display names. Suggestions are recommendations only; they never modify
the schema and may duplicate relations that already exist.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from relation_engine.constants import (
    DefaultConfig,
    KNOWN_ASSOCIATIONS,
    NAME_PATTERN_GROUPS,
)
from relation_engine.domain.models import Entity, RelationCreateRequest, RelationType
from relation_engine.domain.naming import (
    generate_default_inverse_name,
    generate_default_relation_name,
)

logger = logging.getLogger(__name__)


@dataclass
class RelationSuggestion:
    """A proposed relation with a confidence score."""

    type: RelationType
    from_entity_id: str
    to_entity_id: str
    confidence: float
    reason: str
    suggested_name: str
    suggested_inverse_name: Optional[str] = None

    def to_request(self) -> RelationCreateRequest:
        """Turn the suggestion into a creation request the user can accept."""
        return RelationCreateRequest(
            from_entity_id=self.from_entity_id,
            to_entity_id=self.to_entity_id,
            type=self.type,
            name=self.suggested_name,
            inverse_name=self.suggested_inverse_name,
        )

    def to_dict(self) -> Dict:
        return {
            'type': self.type.value,
            'fromEntityId': self.from_entity_id,
            'toEntityId': self.to_entity_id,
            'confidence': self.confidence,
            'reason': self.reason,
            'suggestedName': self.suggested_name,
            'suggestedInverseName': self.suggested_inverse_name,
        }


def find_known_association(owner_name: str, dependent_name: str) -> Optional[Tuple[str, str, str, str]]:
    """Return the KNOWN_ASSOCIATIONS row where owner/dependent keywords match, if any."""
    owner_lower = owner_name.lower()
    dependent_lower = dependent_name.lower()
    for row in KNOWN_ASSOCIATIONS:
        owner_keyword, dependent_keyword = row[0], row[1]
        if owner_keyword in owner_lower and dependent_keyword in dependent_lower:
            return row
    return None


def find_shared_pattern(name1: str, name2: str) -> Optional[str]:
    """Return the key of the first synonym pattern both names match."""
    for key, pattern in NAME_PATTERN_GROUPS:
        if pattern.search(name1) and pattern.search(name2):
            return key
    return None


def generate_relation_name(from_name: str, to_name: str) -> str:
    row = find_known_association(from_name, to_name)
    if row is not None:
        return row[2]
    return generate_default_relation_name(to_name)


def generate_inverse_relation_name(from_name: str, to_name: str) -> str:
    row = find_known_association(from_name, to_name)
    if row is not None:
        return row[3]
    return generate_default_inverse_name(from_name)


class SuggestionEngine:
    """
    Proposes relations between entities using name heuristics.

    Every unordered pair is checked first against the known owner/dependent
    associations (which fix the direction), then against the synonym
    patterns (first entity to second). At most one suggestion is made per
    pair.
    """

    def __init__(self, confidence: float = DefaultConfig.SUGGESTION_CONFIDENCE):
        self.confidence = confidence

    def suggest_relations(self, entities: Sequence[Entity]) -> List[RelationSuggestion]:
        """
        Suggest relations for a list of entities.

        Args:
            entities: Entities in enumeration order

        Returns:
            Suggestions sorted by descending confidence (stable)
        """
        suggestions: List[RelationSuggestion] = []

        for i in range(len(entities)):
            for j in range(i + 1, len(entities)):
                first, second = entities[i], entities[j]
                if first.id == second.id:
                    continue
                suggestion = self._suggest_pair(first, second)
                if suggestion is not None:
                    suggestions.append(suggestion)

        logger.debug(f"Generated {len(suggestions)} relation suggestion(s) for {len(entities)} entities")
        return sorted(suggestions, key=lambda s: s.confidence, reverse=True)

    def _suggest_pair(self, first: Entity, second: Entity) -> Optional[RelationSuggestion]:
        name1, name2 = first.display_name, second.display_name

        if find_known_association(name1, name2) is not None:
            return self._build(first, second, f'"{name1}" typically owns many "{name2}"')
        if find_known_association(name2, name1) is not None:
            return self._build(second, first, f'"{name2}" typically owns many "{name1}"')

        if find_shared_pattern(name1, name2) is not None:
            return self._build(first, second, f'Entity names "{name1}" and "{name2}" appear to be related')
        return None

    def _build(self, owner: Entity, dependent: Entity, reason: str) -> RelationSuggestion:
        return RelationSuggestion(
            type=RelationType.ONE_TO_MANY,
            from_entity_id=owner.id,
            to_entity_id=dependent.id,
            confidence=self.confidence,
            reason=reason,
            suggested_name=generate_relation_name(owner.display_name, dependent.display_name),
            suggested_inverse_name=generate_inverse_relation_name(owner.display_name, dependent.display_name),
        )


def suggest_relations(entities: Sequence[Entity]) -> List[RelationSuggestion]:
    """Suggest relations with the default confidence."""
    return SuggestionEngine().suggest_relations(entities)
