"""
Relation validation.

Checks a single relation for internal and cross-reference correctness
against the rest of the schema. Validation never raises: every problem
becomes a typed error or warning entry, and all checks run.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from relation_engine.constants import ErrorCodes, WarningCodes, FIELD_TYPE_FAMILIES
from relation_engine.domain.models import ProjectSchema, Relation, RelationType
from relation_engine.exceptions import RelationValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """A blocking validation error."""

    code: str
    message: str
    field: Optional[str] = None
    severity: str = "error"


@dataclass(frozen=True)
class ValidationWarning:
    """A non-blocking advisory."""

    code: str
    message: str
    suggestion: Optional[str] = None


@dataclass
class RelationValidationResult:
    """Result of a relation validation."""

    is_valid: bool = True
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    def __post_init__(self):
        """Ensure consistency."""
        if self.errors and self.is_valid:
            self.is_valid = False

    def add_error(self, code: str, message: str, field_path: Optional[str] = None) -> None:
        """Add an error."""
        self.errors.append(ValidationIssue(code=code, message=message, field=field_path))
        self.is_valid = False

    def add_warning(self, code: str, message: str, suggestion: Optional[str] = None) -> None:
        """Add a warning."""
        self.warnings.append(ValidationWarning(code=code, message=message, suggestion=suggestion))

    @property
    def error_codes(self) -> List[str]:
        return [error.code for error in self.errors]

    @property
    def warning_codes(self) -> List[str]:
        return [warning.code for warning in self.warnings]

    def raise_if_invalid(self, relation_id: Optional[str] = None) -> None:
        """Raise RelationValidationError if invalid."""
        if not self.is_valid:
            raise RelationValidationError(
                f"Validation failed: {'; '.join(error.message for error in self.errors)}",
                relation_id=relation_id,
                context={"errors": self.error_codes, "warnings": self.warning_codes},
            )


def normalize_field_type(field_type: str) -> str:
    """Map an ORM column type onto its compatibility family."""
    key = (field_type or "").strip().lower()
    # Strip length/precision, e.g. 'varchar(255)' -> 'varchar'
    key = key.split("(", 1)[0].strip()
    return FIELD_TYPE_FAMILIES.get(key, key)


def are_field_types_compatible(source_type: str, target_type: str) -> bool:
    return normalize_field_type(source_type) == normalize_field_type(target_type)


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class RelationValidator:
    """
    Validates relations against a project schema snapshot.

    Checks, in order: entity existence, relation name, type-specific rules
    and the many-to-many join-table shape. Results accumulate rather than
    short-circuit.
    """

    def validate(self, relation: Relation, schema: ProjectSchema) -> RelationValidationResult:
        """
        Validate a relation.

        Args:
            relation: Relation to check
            schema: Project schema snapshot (read only)

        Returns:
            Validation result with errors and warnings
        """
        result = RelationValidationResult()

        self._validate_entities(relation, schema, result)
        self._validate_name(relation, result)
        self._validate_type_specific(relation, schema, result)

        if relation.type is RelationType.MANY_TO_MANY:
            self._validate_many_to_many(relation, result)

        logger.debug(
            f"Validated relation '{relation.name}' ({relation.id}): "
            f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )
        return result

    def _validate_entities(self, relation: Relation, schema: ProjectSchema, result: RelationValidationResult) -> None:
        if schema.get_entity(relation.source.entity_id) is None:
            result.add_error(
                ErrorCodes.ENTITY_NOT_FOUND,
                f"Source entity {relation.source.entity_name or relation.source.entity_id} does not exist",
                "from.entityId",
            )
        if schema.get_entity(relation.target.entity_id) is None:
            result.add_error(
                ErrorCodes.ENTITY_NOT_FOUND,
                f"Target entity {relation.target.entity_name or relation.target.entity_id} does not exist",
                "to.entityId",
            )

    def _validate_name(self, relation: Relation, result: RelationValidationResult) -> None:
        if _is_blank(relation.name):
            result.add_error(ErrorCodes.INVALID_NAME, "Relation name cannot be empty", "name")

    def _validate_type_specific(self, relation: Relation, schema: ProjectSchema, result: RelationValidationResult) -> None:
        if schema.get_entity(relation.source.entity_id) is None or schema.get_entity(relation.target.entity_id) is None:
            return

        if relation.type is RelationType.ONE_TO_ONE:
            self._check_multiple_one_to_one(relation, schema, result)
        elif relation.type in (RelationType.ONE_TO_MANY, RelationType.MANY_TO_ONE):
            if relation.source.field_id and relation.target.field_id:
                self._check_foreign_key_types(relation, schema, result)
        elif relation.type is RelationType.MANY_TO_MANY:
            if relation.join_table is not None and not _is_blank(relation.join_table.name):
                self._check_join_table_collisions(relation, schema, result)

    def _check_multiple_one_to_one(self, relation: Relation, schema: ProjectSchema, result: RelationValidationResult) -> None:
        entity_id = relation.source.entity_id
        existing = [
            r for r in schema.relations
            if r.id != relation.id
            and r.type is RelationType.ONE_TO_ONE
            and entity_id in (r.source.entity_id, r.target.entity_id)
        ]
        if existing:
            result.add_warning(
                WarningCodes.MULTIPLE_ONE_TO_ONE,
                f"Entity {relation.source.entity_name} already takes part in a one-to-one relation",
                "Consider a one-to-many relation or splitting the entity",
            )

    def _check_foreign_key_types(self, relation: Relation, schema: ProjectSchema, result: RelationValidationResult) -> None:
        source_field = schema.get_entity(relation.source.entity_id).get_field(relation.source.field_id)
        target_field = schema.get_entity(relation.target.entity_id).get_field(relation.target.field_id)

        if source_field is None:
            result.add_error(
                ErrorCodes.FIELD_NOT_FOUND,
                f"Field {relation.source.field_id} does not exist on {relation.source.entity_name}",
                "from.fieldId",
            )
        if target_field is None:
            result.add_error(
                ErrorCodes.FIELD_NOT_FOUND,
                f"Field {relation.target.field_id} does not exist on {relation.target.entity_name}",
                "to.fieldId",
            )
        if source_field is None or target_field is None:
            return

        if not are_field_types_compatible(source_field.type, target_field.type):
            result.add_error(
                ErrorCodes.FK_TYPE_MISMATCH,
                f"Foreign key type mismatch: {source_field.display_name} ({source_field.type}) "
                f"cannot reference {target_field.display_name} ({target_field.type})",
                "from.fieldId",
            )

    def _check_join_table_collisions(self, relation: Relation, schema: ProjectSchema, result: RelationValidationResult) -> None:
        join_table_name = relation.join_table.name

        table_names = {entity.effective_table_name for entity in schema.entities.values()}
        if join_table_name in table_names:
            result.add_error(
                ErrorCodes.JOIN_TABLE_NAME_CONFLICT,
                f'Join table name "{join_table_name}" conflicts with an existing table name',
                "joinTable.name",
            )

        other_join_tables = {
            r.join_table.name
            for r in schema.relations
            if r.id != relation.id and r.type is RelationType.MANY_TO_MANY and r.join_table is not None
        }
        if join_table_name in other_join_tables:
            result.add_error(
                ErrorCodes.JOIN_TABLE_NAME_CONFLICT,
                f'Join table name "{join_table_name}" is already used by another relation',
                "joinTable.name",
            )

    def _validate_many_to_many(self, relation: Relation, result: RelationValidationResult) -> None:
        join_table = relation.join_table
        if join_table is None:
            result.add_error(
                ErrorCodes.MISSING_JOIN_TABLE,
                "Many-to-many relations must define a join table",
                "joinTable",
            )
            return

        if _is_blank(join_table.name):
            result.add_error(ErrorCodes.INVALID_JOIN_TABLE_NAME, "Join table name cannot be empty", "joinTable.name")
        if _is_blank(join_table.join_column):
            result.add_error(ErrorCodes.INVALID_JOIN_COLUMN, "Join column name cannot be empty", "joinTable.joinColumn")
        if _is_blank(join_table.inverse_join_column):
            result.add_error(
                ErrorCodes.INVALID_INVERSE_JOIN_COLUMN,
                "Inverse join column name cannot be empty",
                "joinTable.inverseJoinColumn",
            )
        elif join_table.inverse_join_column == join_table.join_column:
            result.add_error(
                ErrorCodes.JOIN_COLUMN_CONFLICT,
                f'Join column and inverse join column are both "{join_table.join_column}"',
                "joinTable.inverseJoinColumn",
            )


def validate_relation(relation: Relation, schema: ProjectSchema) -> RelationValidationResult:
    """Validate a relation against a schema snapshot."""
    return RelationValidator().validate(relation, schema)
