"""
Domain module for the relation engine.

This module contains the schema model and the relation integrity logic:
creation, validation, conflict detection and suggestions. Everything here
is a pure function over a caller-supplied schema snapshot.
"""

from .models import (
    RelationType,
    CascadeType,
    EntityStatus,
    FieldInfo,
    Entity,
    RelationEndpoint,
    RelationConfig,
    JoinTableConfig,
    RelationMetadata,
    Relation,
    RelationCreateRequest,
    ProjectSchema,
)

from .factory import (
    RelationFactory,
    create_relation,
)

from .validation import (
    RelationValidator,
    RelationValidationResult,
    ValidationIssue,
    ValidationWarning,
    validate_relation,
)

from .conflicts import (
    ConflictDetector,
    ConflictType,
    RelationConflict,
    check_conflicts,
    has_circular_dependency,
)

from .suggestions import (
    SuggestionEngine,
    RelationSuggestion,
    suggest_relations,
)

__all__ = [
    # Core models
    'RelationType',
    'CascadeType',
    'EntityStatus',
    'FieldInfo',
    'Entity',
    'RelationEndpoint',
    'RelationConfig',
    'JoinTableConfig',
    'RelationMetadata',
    'Relation',
    'RelationCreateRequest',
    'ProjectSchema',

    # Factory
    'RelationFactory',
    'create_relation',

    # Validation
    'RelationValidator',
    'RelationValidationResult',
    'ValidationIssue',
    'ValidationWarning',
    'validate_relation',

    # Conflicts
    'ConflictDetector',
    'ConflictType',
    'RelationConflict',
    'check_conflicts',
    'has_circular_dependency',

    # Suggestions
    'SuggestionEngine',
    'RelationSuggestion',
    'suggest_relations',
]
