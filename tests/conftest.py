# File: tests/conftest.py
# Shared pytest fixtures: schema snapshots and project documents.

import pytest
import yaml

from builders import FIXED_TIMESTAMP, make_relation, make_schema, sequential_ids, shop_entities
from relation_engine.domain.factory import RelationFactory
from relation_engine.domain.models import ProjectSchema, RelationType


@pytest.fixture
def entities():
    return shop_entities()


@pytest.fixture
def shop_schema(entities) -> ProjectSchema:
    """User 1-n Order, no other relations."""
    user, order = entities["user"], entities["order"]
    return make_schema(
        entities.values(),
        [make_relation("rel-orders", user, order, RelationType.ONE_TO_MANY, name="orders", inverse_name="user")],
    )


@pytest.fixture
def factory() -> RelationFactory:
    return RelationFactory(id_factory=sequential_ids("new"), clock=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def project_file(tmp_path, shop_schema):
    """The shop schema written as a full project document."""
    path = tmp_path / "project.yaml"
    document = {"id": "project-1", "name": "Shop", "schema": shop_schema.to_dict()}
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return path
