"""
Tests for the relation factory.
"""

import pytest

from builders import FIXED_TIMESTAMP, make_entity, make_schema, sequential_ids
from relation_engine.config import RelationDefaultsSchema
from relation_engine.domain.factory import RelationFactory, create_relation
from relation_engine.domain.models import (
    CascadeType,
    RelationCreateRequest,
    RelationType,
)
from relation_engine.exceptions import EntityNotFoundError, RelationValidationError


def test_creates_relation_with_defaults(factory, shop_schema, entities):
    request = RelationCreateRequest(
        from_entity_id=entities["user"].id,
        to_entity_id=entities["order"].id,
        type=RelationType.ONE_TO_MANY,
        name="orders",
        inverse_name="user",
    )

    relation = factory.create_relation(request, shop_schema)

    assert relation.id == "new-1"
    assert relation.type is RelationType.ONE_TO_MANY
    assert relation.source.entity_name == "User"
    assert relation.target.entity_name == "Order"
    assert relation.inverse_name == "user"
    assert relation.join_table is None

    assert relation.config.cascade is False
    assert relation.config.on_delete is CascadeType.RESTRICT
    assert relation.config.on_update is CascadeType.RESTRICT
    assert relation.config.nullable is True
    assert relation.config.eager is False
    assert relation.config.lazy is True

    assert relation.metadata.created_at == FIXED_TIMESTAMP
    assert relation.metadata.updated_at == relation.metadata.created_at
    assert relation.metadata.created_by == "user"


def test_factory_does_not_touch_schema(factory, shop_schema, entities):
    before = shop_schema.to_dict()
    request = RelationCreateRequest(entities["user"].id, entities["tag"].id, RelationType.ONE_TO_MANY, "tags")

    factory.create_relation(request, shop_schema)

    assert shop_schema.to_dict() == before


def test_every_relation_gets_a_fresh_id(factory, shop_schema, entities):
    request = RelationCreateRequest(entities["user"].id, entities["tag"].id, RelationType.ONE_TO_MANY, "tags")

    first = factory.create_relation(request, shop_schema)
    second = factory.create_relation(request, shop_schema)

    assert first.id != second.id


def test_default_ids_are_uuids(shop_schema, entities):
    request = RelationCreateRequest(entities["user"].id, entities["tag"].id, RelationType.ONE_TO_MANY, "tags")
    relation = create_relation(request, shop_schema)
    assert len(relation.id) == 36
    assert relation.metadata.created_at


def test_partial_config_overrides_defaults(factory, shop_schema, entities):
    request = RelationCreateRequest(
        from_entity_id=entities["order"].id,
        to_entity_id=entities["user"].id,
        type=RelationType.MANY_TO_ONE,
        name="user",
        config={"cascade": True, "on_delete": CascadeType.CASCADE, "nullable": None},
    )

    relation = factory.create_relation(request, shop_schema)

    assert relation.config.cascade is True
    assert relation.config.on_delete is CascadeType.CASCADE
    assert relation.config.on_update is CascadeType.RESTRICT
    # None means "not set"
    assert relation.config.nullable is True


def test_config_override_spellings_are_normalized(factory, shop_schema, entities):
    request = RelationCreateRequest(
        entities["order"].id, entities["user"].id, RelationType.MANY_TO_ONE, "user",
        config={"on_delete": "set null", "on_update": "no-action"},
    )

    relation = factory.create_relation(request, shop_schema)

    assert relation.config.on_delete is CascadeType.SET_NULL
    assert relation.config.on_update is CascadeType.NO_ACTION


def test_unknown_config_override_raises(factory, shop_schema, entities):
    request = RelationCreateRequest(
        entities["order"].id, entities["user"].id, RelationType.MANY_TO_ONE, "user",
        config={"on_delete": "DROP"},
    )

    with pytest.raises(RelationValidationError) as exc_info:
        factory.create_relation(request, shop_schema)

    assert exc_info.value.context["errors"][0].startswith("on_delete:")


def test_configured_defaults_are_applied(shop_schema, entities):
    defaults = RelationDefaultsSchema(on_delete="set_null", eager=True)
    factory = RelationFactory(defaults=defaults, created_by="designer", id_factory=sequential_ids())
    request = RelationCreateRequest(entities["order"].id, entities["user"].id, RelationType.MANY_TO_ONE, "user")

    relation = factory.create_relation(request, shop_schema)

    assert relation.config.on_delete is CascadeType.SET_NULL
    assert relation.config.eager is True
    assert relation.metadata.created_by == "designer"


def test_many_to_many_join_table_is_synthesized(factory):
    post = make_entity("a1-b2", "post", "Post")
    tag = make_entity("c3-d4", "tag", "Tag")
    schema = make_schema([post, tag])
    request = RelationCreateRequest("a1-b2", "c3-d4", RelationType.MANY_TO_MANY, "tags")

    relation = factory.create_relation(request, schema)

    assert relation.join_table.name == "relation_a1_b2_c3_d4"
    assert relation.join_table.join_column == "a1-b2_id"
    assert relation.join_table.inverse_join_column == "c3-d4_id"


def test_many_to_many_keeps_supplied_join_table_parts(factory, shop_schema, entities):
    request = RelationCreateRequest(
        from_entity_id=entities["product"].id,
        to_entity_id=entities["tag"].id,
        type=RelationType.MANY_TO_MANY,
        name="tags",
        join_table={"name": "product_tags"},
    )

    relation = factory.create_relation(request, shop_schema)

    assert relation.join_table.name == "product_tags"
    assert relation.join_table.join_column == "product-1_id"
    assert relation.join_table.inverse_join_column == "tag-1_id"


def test_join_table_is_dropped_for_other_types(factory, shop_schema, entities):
    request = RelationCreateRequest(
        from_entity_id=entities["user"].id,
        to_entity_id=entities["order"].id,
        type=RelationType.ONE_TO_MANY,
        name="orders",
        join_table={"name": "user_orders"},
    )

    assert factory.create_relation(request, shop_schema).join_table is None


def test_field_endpoints_snapshot_field_names(factory, shop_schema, entities):
    request = RelationCreateRequest(
        from_entity_id=entities["order"].id,
        to_entity_id=entities["user"].id,
        type=RelationType.MANY_TO_ONE,
        name="user",
        from_field_id="order-user-id",
        to_field_id="user-id",
    )

    relation = factory.create_relation(request, shop_schema)

    assert relation.source.field_id == "order-user-id"
    assert relation.source.field_name == "user_id"
    assert relation.target.field_name == "id"


def test_entity_name_is_a_snapshot(factory, shop_schema, entities):
    request = RelationCreateRequest(entities["user"].id, entities["tag"].id, RelationType.ONE_TO_MANY, "tags")
    relation = factory.create_relation(request, shop_schema)

    entities["user"].label = "Customer"

    assert relation.source.entity_name == "User"


def test_metadata_carries_description_and_tags(factory, shop_schema, entities):
    request = RelationCreateRequest(
        entities["user"].id, entities["tag"].id, RelationType.ONE_TO_MANY, "tags",
        description="Tags a user follows", tags=["social"],
    )

    relation = factory.create_relation(request, shop_schema)

    assert relation.metadata.description == "Tags a user follows"
    assert relation.metadata.tags == ["social"]


@pytest.mark.parametrize("from_id,to_id,missing", [
    ("ghost", "order-1", ["ghost"]),
    ("user-1", "ghost", ["ghost"]),
    ("ghost-a", "ghost-b", ["ghost-a", "ghost-b"]),
])
def test_unknown_entities_raise(factory, shop_schema, from_id, to_id, missing):
    request = RelationCreateRequest(from_id, to_id, RelationType.ONE_TO_MANY, "orders")

    with pytest.raises(EntityNotFoundError) as exc_info:
        factory.create_relation(request, shop_schema)

    assert exc_info.value.context["entity_ids"] == missing
    assert exc_info.value.error_code == "ENTITY_NOT_FOUND"
