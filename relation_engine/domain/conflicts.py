"""
Graph-level conflict detection.

Checks a candidate relation against the set of existing relations for
duplicates, circular dependency chains and naming collisions. Conflicts
are advisory: the caller decides whether to block on them.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from relation_engine.domain.models import Relation

logger = logging.getLogger(__name__)


class ConflictType(Enum):
    """Kinds of relation graph conflicts."""

    DUPLICATE = "duplicate"
    CIRCULAR = "circular"
    NAMING = "naming"
    FIELD_TYPE = "field_type"


@dataclass
class RelationConflict:
    """A conflict between a candidate relation and the existing relations."""

    type: ConflictType
    message: str
    conflicting_relation: Optional[Relation] = None
    suggestion: Optional[str] = None
    cycle: Optional[List[str]] = None

    def to_dict(self) -> Dict:
        data = {'type': self.type.value, 'message': self.message}
        if self.conflicting_relation is not None:
            data['conflictingRelationId'] = self.conflicting_relation.id
        if self.suggestion:
            data['suggestion'] = self.suggestion
        if self.cycle:
            data['cycle'] = list(self.cycle)
        return data


def build_dependency_graph(relations: Iterable[Relation]) -> Dict[str, List[str]]:
    """Adjacency lists of source entity id -> target entity ids, in relation order."""
    graph: Dict[str, List[str]] = defaultdict(list)
    for relation in relations:
        graph[relation.source.entity_id].append(relation.target.entity_id)
    return graph


def find_cycle(graph: Dict[str, List[str]], start: str) -> Optional[List[str]]:
    """
    Find a cycle reachable from `start` with an iterative depth-first search.

    Returns:
        The cycle as a list of entity ids, first node repeated at the end,
        or None when no node on the traversal stack is revisited.
    """
    visited = set()
    on_stack = set()
    path: List[str] = []
    stack = [(start, iter(graph.get(start, ())))]
    visited.add(start)
    on_stack.add(start)
    path.append(start)

    while stack:
        node, neighbours = stack[-1]
        advanced = False
        for neighbour in neighbours:
            if neighbour in on_stack:
                return path[path.index(neighbour):] + [neighbour]
            if neighbour not in visited:
                visited.add(neighbour)
                on_stack.add(neighbour)
                path.append(neighbour)
                stack.append((neighbour, iter(graph.get(neighbour, ()))))
                advanced = True
                break
        if not advanced:
            stack.pop()
            on_stack.discard(node)
            path.pop()

    return None


class ConflictDetector:
    """
    Detects duplicate, circular and naming conflicts.

    Conflicts are reported in check order: duplicate, circular, naming.
    """

    def __init__(self, cascade_edges_only: bool = False):
        """
        Initialize the detector.

        Args:
            cascade_edges_only: Only relations with cascade enabled form
                dependency edges for cycle detection
        """
        self.cascade_edges_only = cascade_edges_only

    def check_conflicts(self, relation: Relation, existing_relations: List[Relation]) -> List[RelationConflict]:
        """
        Check a validated relation against the existing relations.

        Args:
            relation: Candidate relation
            existing_relations: Relations already in the project (may include
                an older version of the candidate, matched by id)

        Returns:
            Conflicts, possibly empty
        """
        others = [r for r in existing_relations if r.id != relation.id]
        conflicts: List[RelationConflict] = []

        duplicate = self._find_duplicate(relation, others)
        if duplicate is not None:
            conflicts.append(RelationConflict(
                type=ConflictType.DUPLICATE,
                message=(
                    f"An identical relation already exists: "
                    f"{relation.source.entity_name} -> {relation.target.entity_name}"
                ),
                conflicting_relation=duplicate,
                suggestion="Use a different relation type or check whether the relation was created twice",
            ))

        cycle = self.find_circular_dependency(relation, others)
        if cycle is not None:
            conflicts.append(RelationConflict(
                type=ConflictType.CIRCULAR,
                message=f"Circular dependency detected: {' -> '.join(cycle)}",
                suggestion="Rework the relation structure to avoid the dependency cycle",
                cycle=cycle,
            ))

        naming = next((r for r in others if r.name == relation.name), None)
        if naming is not None:
            conflicts.append(RelationConflict(
                type=ConflictType.NAMING,
                message=f'Relation name "{relation.name}" is already in use',
                conflicting_relation=naming,
                suggestion="Choose a different relation name",
            ))

        if conflicts:
            logger.debug(
                f"Relation '{relation.name}' ({relation.id}) has conflicts: "
                f"{', '.join(c.type.value for c in conflicts)}"
            )
        return conflicts

    def find_circular_dependency(self, relation: Relation, others: List[Relation]) -> Optional[List[str]]:
        """
        Look for a cycle in the graph of `others` plus the candidate,
        starting at the candidate's source entity.
        """
        edges = [r for r in others if r.id != relation.id] + [relation]
        if self.cascade_edges_only:
            edges = [r for r in edges if r.config.cascade]
        graph = build_dependency_graph(edges)
        return find_cycle(graph, relation.source.entity_id)

    @staticmethod
    def _find_duplicate(relation: Relation, others: List[Relation]) -> Optional[Relation]:
        for other in others:
            if other.edge == relation.edge and other.type is relation.type:
                return other
        return None


def check_conflicts(
    relation: Relation,
    existing_relations: List[Relation],
    cascade_edges_only: bool = False,
) -> List[RelationConflict]:
    """Check a relation against existing relations."""
    return ConflictDetector(cascade_edges_only=cascade_edges_only).check_conflicts(relation, existing_relations)


def has_circular_dependency(relation: Relation, existing_relations: List[Relation]) -> bool:
    """True when adding `relation` closes a dependency cycle through its source."""
    return ConflictDetector().find_circular_dependency(relation, existing_relations) is not None
