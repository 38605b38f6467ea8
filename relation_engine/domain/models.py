"""
Core domain models for the relation engine.

These records describe entities, relations and the project schema snapshot
that every engine component reads. They carry no behaviour beyond lookups
and (de)serialization to the project document format, which uses the
designer's camelCase keys.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Mapping
from enum import Enum

from relation_engine.constants import (
    RELATION_TYPE_DISPLAY_NAMES,
    CASCADE_TYPE_DISPLAY_NAMES,
)
from relation_engine.exceptions import SchemaLoadError


class RelationType(Enum):
    """Types of entity relationships."""

    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_ONE = "manyToOne"
    MANY_TO_MANY = "manyToMany"

    @property
    def display_name(self) -> str:
        return RELATION_TYPE_DISPLAY_NAMES[self.value]

    @property
    def requires_join_table(self) -> bool:
        """Only many-to-many relations are materialized through a join table."""
        return self is RelationType.MANY_TO_MANY


class CascadeType(Enum):
    """Referential actions applied to dependent rows."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"

    @property
    def display_name(self) -> str:
        return CASCADE_TYPE_DISPLAY_NAMES[self.value]


class EntityStatus(Enum):
    """Lifecycle status of an entity."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    ARCHIVED = "archived"


def _parse_enum(enum_cls, value: Any, what: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise SchemaLoadError(
            f"Invalid {what} '{value}'. Expected one of: {allowed}",
            context={"field": what, "value": value},
        )


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise SchemaLoadError(
            f"Expected a mapping for {what}, got {type(data).__name__}",
            context={"field": what},
        )
    return data


def _require(data: Mapping[str, Any], key: str, what: str) -> Any:
    data = _mapping(data, what)
    if key not in data or data[key] is None:
        raise SchemaLoadError(
            f"Missing required key '{key}' in {what}",
            context={"field": what, "key": key},
        )
    return data[key]


@dataclass
class FieldInfo:
    """
    A typed field of an entity.

    Only identity and type are used by the engine; the remaining column
    options are carried so documents survive a round trip.
    """

    id: str
    code: str
    type: str
    label: str = ""
    nullable: bool = True
    primary: bool = False
    unique: bool = False
    length: Optional[int] = None

    @property
    def display_name(self) -> str:
        return self.label or self.code

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the store's nested field representation."""
        typeorm_config: Dict[str, Any] = {
            'type': self.type,
            'nullable': self.nullable,
            'primary': self.primary,
            'unique': self.unique,
        }
        if self.length is not None:
            typeorm_config['length'] = self.length
        return {
            'columnInfo': {
                'id': self.id,
                'code': self.code,
                'label': self.label,
            },
            'typeormConfig': typeorm_config,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldInfo":
        column_info = _require(data, 'columnInfo', 'field')
        typeorm_config = _require(data, 'typeormConfig', 'field')
        return cls(
            id=_require(column_info, 'id', 'field.columnInfo'),
            code=column_info.get('code') or column_info.get('label') or '',
            label=column_info.get('label') or '',
            type=_require(typeorm_config, 'type', 'field.typeormConfig'),
            nullable=typeorm_config.get('nullable', True),
            primary=typeorm_config.get('primary', False),
            unique=typeorm_config.get('unique', False),
            length=typeorm_config.get('length'),
        )


@dataclass
class Entity:
    """
    A named table/model definition owned by the project.

    Relations reference entities by id only; they never own them.
    """

    id: str
    code: str
    label: str = ""
    table_name: Optional[str] = None
    status: EntityStatus = EntityStatus.ENABLED
    fields: Dict[str, FieldInfo] = field(default_factory=dict)
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        """Label shown to users, falling back to the machine code."""
        return self.label or self.code

    @property
    def effective_table_name(self) -> str:
        return self.table_name or self.code

    def get_field(self, field_id: str) -> Optional[FieldInfo]:
        return self.fields.get(field_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the store's nested entity representation."""
        entity_info: Dict[str, Any] = {
            'id': self.id,
            'code': self.code,
            'label': self.label,
            'status': self.status.value,
            'tags': list(self.tags),
        }
        if self.table_name:
            entity_info['tableName'] = self.table_name
        if self.description:
            entity_info['description'] = self.description
        return {
            'entityInfo': entity_info,
            'fields': {field_id: f.to_dict() for field_id, f in self.fields.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Entity":
        entity_info = _require(data, 'entityInfo', 'entity')
        raw_fields = data.get('fields') or {}
        if not isinstance(raw_fields, Mapping):
            raise SchemaLoadError(
                "Entity 'fields' must be a mapping of field id to field",
                context={"entity_id": entity_info.get('id')},
            )
        fields = {}
        for raw_field in raw_fields.values():
            parsed = FieldInfo.from_dict(raw_field)
            fields[parsed.id] = parsed
        return cls(
            id=_require(entity_info, 'id', 'entity.entityInfo'),
            code=_require(entity_info, 'code', 'entity.entityInfo'),
            label=entity_info.get('label') or '',
            table_name=entity_info.get('tableName'),
            status=_parse_enum(EntityStatus, entity_info.get('status', 'enabled'), 'entity status'),
            fields=fields,
            description=entity_info.get('description'),
            tags=list(entity_info.get('tags') or []),
        )


@dataclass
class RelationEndpoint:
    """
    One side of a relation.

    `entity_name` (and `field_name`) are snapshots taken when the relation
    is created and are not refreshed when the entity is renamed.
    """

    entity_id: str
    entity_name: str
    field_id: Optional[str] = None
    field_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'entityId': self.entity_id, 'entityName': self.entity_name}
        if self.field_id is not None:
            data['fieldId'] = self.field_id
        if self.field_name is not None:
            data['fieldName'] = self.field_name
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RelationEndpoint":
        return cls(
            entity_id=_require(data, 'entityId', 'relation endpoint'),
            entity_name=data.get('entityName') or '',
            field_id=data.get('fieldId'),
            field_name=data.get('fieldName'),
        )


@dataclass
class RelationConfig:
    """Behavioural policy of a relation, independent of structural validity."""

    cascade: bool = False
    on_delete: CascadeType = CascadeType.RESTRICT
    on_update: CascadeType = CascadeType.RESTRICT
    nullable: bool = True
    eager: bool = False
    lazy: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cascade': self.cascade,
            'onDelete': self.on_delete.value,
            'onUpdate': self.on_update.value,
            'nullable': self.nullable,
            'eager': self.eager,
            'lazy': self.lazy,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RelationConfig":
        data = _mapping(data, 'relation config')
        defaults = cls()
        return cls(
            cascade=data.get('cascade', defaults.cascade),
            on_delete=_parse_enum(CascadeType, data.get('onDelete', defaults.on_delete), 'onDelete'),
            on_update=_parse_enum(CascadeType, data.get('onUpdate', defaults.on_update), 'onUpdate'),
            nullable=data.get('nullable', defaults.nullable),
            eager=data.get('eager', defaults.eager),
            lazy=data.get('lazy', defaults.lazy),
        )


@dataclass
class JoinTableConfig:
    """Join table materializing a many-to-many relation."""

    name: str
    join_column: str
    inverse_join_column: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'joinColumn': self.join_column,
            'inverseJoinColumn': self.inverse_join_column,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JoinTableConfig":
        data = _mapping(data, 'join table')
        return cls(
            name=data.get('name') or '',
            join_column=data.get('joinColumn') or '',
            inverse_join_column=data.get('inverseJoinColumn') or '',
        )


@dataclass
class RelationMetadata:
    created_at: str
    updated_at: str
    created_by: str = "user"
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'createdBy': self.created_by,
            'tags': list(self.tags),
        }
        if self.description is not None:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RelationMetadata":
        data = _mapping(data, 'relation metadata')
        return cls(
            created_at=data.get('createdAt') or '',
            updated_at=data.get('updatedAt') or '',
            created_by=data.get('createdBy') or 'user',
            description=data.get('description'),
            tags=list(data.get('tags') or []),
        )


@dataclass
class Relation:
    """
    A directed, typed edge between two entities.

    The relation is tagged by `type`; `join_table` belongs to the
    MANY_TO_MANY variant only. Records loaded from a project document may
    still violate that, which is why the validator re-checks it.
    """

    id: str
    type: RelationType
    name: str
    source: RelationEndpoint
    target: RelationEndpoint
    config: RelationConfig = field(default_factory=RelationConfig)
    inverse_name: Optional[str] = None
    join_table: Optional[JoinTableConfig] = None
    metadata: Optional[RelationMetadata] = None

    @property
    def edge(self) -> tuple:
        """Directed edge (source entity id, target entity id)."""
        return (self.source.entity_id, self.target.entity_id)

    @property
    def is_self_referential(self) -> bool:
        return self.source.entity_id == self.target.entity_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the project document representation."""
        data: Dict[str, Any] = {
            'id': self.id,
            'type': self.type.value,
            'name': self.name,
            'from': self.source.to_dict(),
            'to': self.target.to_dict(),
            'config': self.config.to_dict(),
        }
        if self.inverse_name is not None:
            data['inverseName'] = self.inverse_name
        if self.join_table is not None:
            data['joinTable'] = self.join_table.to_dict()
        if self.metadata is not None:
            data['metadata'] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Relation":
        raw_join_table = data.get('joinTable')
        raw_metadata = data.get('metadata')
        return cls(
            id=_require(data, 'id', 'relation'),
            type=_parse_enum(RelationType, _require(data, 'type', 'relation'), 'relation type'),
            name=data.get('name') or '',
            inverse_name=data.get('inverseName'),
            source=RelationEndpoint.from_dict(_require(data, 'from', 'relation')),
            target=RelationEndpoint.from_dict(_require(data, 'to', 'relation')),
            config=RelationConfig.from_dict(data.get('config') or {}),
            join_table=JoinTableConfig.from_dict(raw_join_table) if raw_join_table else None,
            metadata=RelationMetadata.from_dict(raw_metadata) if raw_metadata else None,
        )


@dataclass
class RelationCreateRequest:
    """
    Terse relation description submitted by the UI layer.

    `config` and `join_table` are partial: only the keys the user set are
    present (snake_case keys, e.g. {'on_delete': CascadeType.CASCADE}).
    """

    from_entity_id: str
    to_entity_id: str
    type: RelationType
    name: str
    inverse_name: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)
    join_table: Optional[Dict[str, str]] = None
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    from_field_id: Optional[str] = None
    to_field_id: Optional[str] = None


@dataclass
class ProjectSchema:
    """
    Snapshot of a project's schema: entities, enums and relations.

    Supplied by the persistence collaborator; engine operations read it
    and never mutate it.
    """

    entities: Dict[str, Entity] = field(default_factory=dict)
    enums: Dict[str, Any] = field(default_factory=dict)
    relations: List[Relation] = field(default_factory=list)

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        return self.entities.get(entity_id)

    def get_relation(self, relation_id: str) -> Optional[Relation]:
        for relation in self.relations:
            if relation.id == relation_id:
                return relation
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entities': {entity_id: e.to_dict() for entity_id, e in self.entities.items()},
            'enums': dict(self.enums),
            'relations': [r.to_dict() for r in self.relations],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectSchema":
        """
        Build a snapshot from a project document.

        Accepts either the bare schema or a full project document whose
        schema lives under the 'schema' key.
        """
        if not isinstance(data, Mapping):
            raise SchemaLoadError(
                f"Project document must be a mapping, got {type(data).__name__}"
            )
        if 'schema' in data and isinstance(data['schema'], Mapping):
            data = data['schema']

        raw_entities = data.get('entities') or {}
        raw_relations = data.get('relations') or []
        if not isinstance(raw_entities, Mapping):
            raise SchemaLoadError("'entities' must be a mapping of entity id to entity")
        if not isinstance(raw_relations, list):
            raise SchemaLoadError("'relations' must be a list")

        entities = {}
        for raw_entity in raw_entities.values():
            entity = Entity.from_dict(raw_entity)
            entities[entity.id] = entity

        return cls(
            entities=entities,
            enums=dict(data.get('enums') or {}),
            relations=[Relation.from_dict(raw) for raw in raw_relations],
        )
