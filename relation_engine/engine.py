"""
Relation engine facade.

Wires the factory, validator, conflict detector, suggestion engine and
code generator together under one configuration, and runs them in the
order used when a relation edit is committed.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from relation_engine.codegen import RelationCodeGenerator
from relation_engine.config import EngineConfigSchema
from relation_engine.domain.conflicts import ConflictDetector, RelationConflict
from relation_engine.domain.factory import RelationFactory
from relation_engine.domain.models import ProjectSchema, Relation, RelationCreateRequest
from relation_engine.domain.suggestions import RelationSuggestion, SuggestionEngine
from relation_engine.domain.validation import RelationValidationResult, RelationValidator

logger = logging.getLogger(__name__)


@dataclass
class RelationCommitReport:
    """Outcome of running a relation through validation and conflict checks."""

    relation: Relation
    validation: RelationValidationResult
    conflicts: List[RelationConflict] = field(default_factory=list)
    blocking_conflict_types: List[str] = field(default_factory=list)

    @property
    def blocking_conflicts(self) -> List[RelationConflict]:
        return [c for c in self.conflicts if c.type.value in self.blocking_conflict_types]

    @property
    def accepted(self) -> bool:
        """Valid and free of blocking conflicts. Warnings never block."""
        return self.validation.is_valid and not self.blocking_conflicts


class RelationEngine:
    """
    Entry point for the relation integrity and code-generation engine.

    All operations are pure with respect to the schema snapshot passed in.
    """

    def __init__(self, config: Optional[EngineConfigSchema] = None, factory: Optional[RelationFactory] = None):
        """
        Initialize the engine.

        Args:
            config: Validated configuration (defaults when omitted)
            factory: Relation factory override, e.g. with a fixed id source
        """
        self.config = config or EngineConfigSchema()
        self.factory = factory or RelationFactory(
            defaults=self.config.relation_defaults,
            created_by=self.config.created_by,
        )
        self.validator = RelationValidator()
        self.detector = ConflictDetector(cascade_edges_only=self.config.cascade_edges_only)
        self.suggestion_engine = SuggestionEngine(confidence=self.config.suggestion_confidence)
        self.code_generator = RelationCodeGenerator(indent=self.config.indent)

    def create_relation(self, request: RelationCreateRequest, schema: ProjectSchema) -> Relation:
        return self.factory.create_relation(request, schema)

    def validate_relation(self, relation: Relation, schema: ProjectSchema) -> RelationValidationResult:
        return self.validator.validate(relation, schema)

    def check_conflicts(self, relation: Relation, existing_relations: List[Relation]) -> List[RelationConflict]:
        return self.detector.check_conflicts(relation, existing_relations)

    def generate_code(self, relation: Relation) -> str:
        return self.code_generator.generate(relation)

    def commit(self, request: RelationCreateRequest, schema: ProjectSchema) -> RelationCommitReport:
        """
        Create a relation and run it through validation and conflict detection.

        The relation is not stored; the caller appends it to the project
        when the report is accepted.

        Raises:
            EntityNotFoundError: If the request references unknown entities
        """
        relation = self.create_relation(request, schema)
        return self.review(relation, schema)

    def review(self, relation: Relation, schema: ProjectSchema) -> RelationCommitReport:
        """Validate a new or edited relation; conflicts are checked only when it is valid."""
        validation = self.validate_relation(relation, schema)
        conflicts: List[RelationConflict] = []
        if validation.is_valid:
            conflicts = self.check_conflicts(relation, schema.relations)

        report = RelationCommitReport(
            relation=relation,
            validation=validation,
            conflicts=conflicts,
            blocking_conflict_types=list(self.config.blocking_conflicts),
        )
        logger.debug(
            f"Reviewed relation '{relation.name}': accepted={report.accepted}, "
            f"errors={len(validation.errors)}, warnings={len(validation.warnings)}, "
            f"conflicts={len(conflicts)}"
        )
        return report

    def audit(self, schema: ProjectSchema) -> List[RelationCommitReport]:
        """Review every stored relation against the rest of the project."""
        return [self.review(relation, schema) for relation in schema.relations]

    def suggest(self, schema: ProjectSchema) -> List[RelationSuggestion]:
        """
        Suggest relations for the schema's entities.

        Pairs already connected by a relation (in either direction) and
        suggestions below `min_suggestion_confidence` are dropped.
        """
        connected = set()
        for relation in schema.relations:
            connected.add(relation.edge)
            connected.add((relation.target.entity_id, relation.source.entity_id))

        suggestions = self.suggestion_engine.suggest_relations(list(schema.entities.values()))
        return [
            s for s in suggestions
            if (s.from_entity_id, s.to_entity_id) not in connected
            and s.confidence >= self.config.min_suggestion_confidence
        ]
