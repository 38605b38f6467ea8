"""
Relation factory.

Builds a well-formed relation record from a terse creation request,
filling in identifiers, timestamps, behaviour defaults and, for
many-to-many relations, join-table names.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Any, Dict

from pydantic import ValidationError

from relation_engine.config import RelationDefaultsSchema
from relation_engine.domain.models import (
    CascadeType,
    Entity,
    JoinTableConfig,
    ProjectSchema,
    Relation,
    RelationConfig,
    RelationCreateRequest,
    RelationEndpoint,
    RelationMetadata,
)
from relation_engine.domain.naming import generate_join_table_name, generate_join_column_name
from relation_engine.exceptions import EntityNotFoundError, RelationValidationError

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


class RelationFactory:
    """
    Creates relation records from creation requests.

    The factory performs no validation: its output may be structurally
    invalid and must go through the validator before acceptance.

    Entity names are copied into the relation endpoints when the relation
    is created. The copy is a snapshot: renaming the entity later leaves
    the relation's `entity_name` stale until the relation is recreated.
    Consumers that need the current name must look the entity up by id.
    """

    def __init__(
        self,
        defaults: Optional[RelationDefaultsSchema] = None,
        created_by: str = "user",
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], str] = _utc_now_iso,
    ):
        """
        Initialize the factory.

        Args:
            defaults: Relation behaviour defaults (configuration)
            created_by: Author recorded in metadata
            id_factory: Callable producing new relation ids
            clock: Callable producing ISO-8601 timestamps
        """
        self.defaults = defaults or RelationDefaultsSchema()
        self.created_by = created_by
        self.id_factory = id_factory
        self.clock = clock

    def create_relation(self, request: RelationCreateRequest, schema: ProjectSchema) -> Relation:
        """
        Create a relation from a request.

        Args:
            request: Creation request from the UI layer
            schema: Project schema snapshot

        Returns:
            New relation record

        Raises:
            EntityNotFoundError: If either entity id does not resolve
            RelationValidationError: If a config override has an unknown value
        """
        from_entity = schema.get_entity(request.from_entity_id)
        to_entity = schema.get_entity(request.to_entity_id)

        if from_entity is None or to_entity is None:
            missing = [
                entity_id
                for entity_id, entity in (
                    (request.from_entity_id, from_entity),
                    (request.to_entity_id, to_entity),
                )
                if entity is None
            ]
            raise EntityNotFoundError(
                f"Source or target entity does not exist: {', '.join(missing)}",
                entity_ids=missing,
            )

        timestamp = self.clock()
        relation = Relation(
            id=self.id_factory(),
            type=request.type,
            name=request.name,
            inverse_name=request.inverse_name,
            source=self._build_endpoint(from_entity, request.from_field_id),
            target=self._build_endpoint(to_entity, request.to_field_id),
            config=self._build_config(request.config),
            join_table=self._build_join_table(request),
            metadata=RelationMetadata(
                created_at=timestamp,
                updated_at=timestamp,
                created_by=self.created_by,
                description=request.description,
                tags=list(request.tags or []),
            ),
        )
        logger.debug(
            f"Created {relation.type.value} relation '{relation.name}' "
            f"{relation.source.entity_name} -> {relation.target.entity_name} ({relation.id})"
        )
        return relation

    def _build_endpoint(self, entity: Entity, field_id: Optional[str]) -> RelationEndpoint:
        field_name = None
        if field_id is not None:
            field_info = entity.get_field(field_id)
            if field_info is not None:
                field_name = field_info.display_name
        return RelationEndpoint(
            entity_id=entity.id,
            entity_name=entity.display_name,
            field_id=field_id,
            field_name=field_name,
        )

    def _build_config(self, overrides: Optional[Dict[str, Any]]) -> RelationConfig:
        """Merge the request's partial config over the configured defaults."""
        values = self.defaults.model_dump()
        values.update({key: value for key, value in (overrides or {}).items() if value is not None})
        try:
            merged = RelationDefaultsSchema.model_validate(values)
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
            raise RelationValidationError(
                f"Invalid relation config: {'; '.join(problems)}",
                context={"errors": problems},
            ) from e
        return RelationConfig(
            cascade=merged.cascade,
            on_delete=CascadeType(merged.on_delete),
            on_update=CascadeType(merged.on_update),
            nullable=merged.nullable,
            eager=merged.eager,
            lazy=merged.lazy,
        )

    def _build_join_table(self, request: RelationCreateRequest) -> Optional[JoinTableConfig]:
        if not request.type.requires_join_table:
            if request.join_table:
                logger.debug(f"Ignoring join table for {request.type.value} relation '{request.name}'")
            return None

        partial = request.join_table or {}
        return JoinTableConfig(
            name=partial.get("name") or generate_join_table_name(request.from_entity_id, request.to_entity_id),
            join_column=partial.get("join_column") or generate_join_column_name(request.from_entity_id),
            inverse_join_column=(
                partial.get("inverse_join_column") or generate_join_column_name(request.to_entity_id)
            ),
        )


def create_relation(
    request: RelationCreateRequest,
    schema: ProjectSchema,
    factory: Optional[RelationFactory] = None,
) -> Relation:
    """Create a relation with a default (or the given) factory."""
    return (factory or RelationFactory()).create_relation(request, schema)
