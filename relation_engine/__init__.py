"""
Relation integrity and code-generation engine for ORM schema designers.
"""

from relation_engine.domain import (
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
    RelationFactory,
    create_relation,
    RelationValidator,
    RelationValidationResult,
    validate_relation,
    ConflictDetector,
    ConflictType,
    RelationConflict,
    check_conflicts,
    SuggestionEngine,
    RelationSuggestion,
    suggest_relations,
)
from relation_engine.codegen import RelationCodeGenerator, generate_relation_code
from relation_engine.config import EngineConfigSchema, load_config
from relation_engine.engine import RelationEngine, RelationCommitReport
from relation_engine.exceptions import (
    RelationEngineError,
    EntityNotFoundError,
    RelationValidationError,
    CodeGenerationError,
    ConfigurationError,
    SchemaLoadError,
)

__version__ = "0.1.0"

__all__ = [
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
    'RelationFactory',
    'create_relation',
    'RelationValidator',
    'RelationValidationResult',
    'validate_relation',
    'ConflictDetector',
    'ConflictType',
    'RelationConflict',
    'check_conflicts',
    'SuggestionEngine',
    'RelationSuggestion',
    'suggest_relations',
    'RelationCodeGenerator',
    'generate_relation_code',
    'EngineConfigSchema',
    'load_config',
    'RelationEngine',
    'RelationCommitReport',
    'RelationEngineError',
    'EntityNotFoundError',
    'RelationValidationError',
    'CodeGenerationError',
    'ConfigurationError',
    'SchemaLoadError',
]
