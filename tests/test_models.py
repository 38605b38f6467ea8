"""
Tests for the schema model: enums, lookups and project document (de)serialization.
"""

from unittest import TestCase

from builders import make_entity, make_field, make_relation, make_schema
from relation_engine.domain.models import (
    CascadeType,
    Entity,
    EntityStatus,
    JoinTableConfig,
    ProjectSchema,
    Relation,
    RelationType,
)
from relation_engine.exceptions import SchemaLoadError


STORE_DOCUMENT = {
    "id": "project-1",
    "name": "Blog",
    "schema": {
        "entities": {
            "post-1": {
                "entityInfo": {
                    "id": "post-1",
                    "code": "post",
                    "label": "Post",
                    "tableName": "posts",
                    "status": "enabled",
                },
                "fields": {
                    "post-id": {
                        "columnInfo": {"id": "post-id", "code": "id", "label": "ID"},
                        "typeormConfig": {"type": "int", "primary": True, "nullable": False},
                    }
                },
            },
            "tag-1": {
                "entityInfo": {"id": "tag-1", "code": "tag", "label": "", "status": "archived"},
                "fields": {},
            },
        },
        "enums": {},
        "relations": [
            {
                "id": "rel-1",
                "type": "manyToMany",
                "name": "tags",
                "inverseName": "posts",
                "from": {"entityId": "post-1", "entityName": "Post"},
                "to": {"entityId": "tag-1", "entityName": "tag"},
                "config": {
                    "cascade": True,
                    "onDelete": "CASCADE",
                    "onUpdate": "NO ACTION",
                    "nullable": True,
                    "eager": False,
                    "lazy": True,
                },
                "joinTable": {"name": "post_tags", "joinColumn": "post_id", "inverseJoinColumn": "tag_id"},
                "metadata": {
                    "createdAt": "2024-01-01T00:00:00Z",
                    "updatedAt": "2024-01-02T00:00:00Z",
                    "createdBy": "user",
                    "tags": ["blog"],
                },
            }
        ],
    },
}


class TestEnums(TestCase):
    """Test enum helpers"""

    def test_relation_type_wire_values(self):
        self.assertEqual(RelationType("oneToMany"), RelationType.ONE_TO_MANY)
        self.assertEqual(RelationType.MANY_TO_MANY.value, "manyToMany")

    def test_only_many_to_many_requires_join_table(self):
        required = [t for t in RelationType if t.requires_join_table]
        self.assertEqual(required, [RelationType.MANY_TO_MANY])

    def test_display_names(self):
        self.assertEqual(RelationType.ONE_TO_ONE.display_name, "One-to-One")
        self.assertEqual(CascadeType.SET_NULL.display_name, "Set Null")
        for cascade in CascadeType:
            self.assertTrue(cascade.display_name)


class TestEntity(TestCase):
    """Test entity lookups"""

    def test_display_name_falls_back_to_code(self):
        self.assertEqual(make_entity("e1", "user", "User").display_name, "User")
        self.assertEqual(make_entity("e1", "user").display_name, "user")

    def test_effective_table_name_falls_back_to_code(self):
        self.assertEqual(make_entity("e1", "user", table_name="users").effective_table_name, "users")
        self.assertEqual(make_entity("e1", "user").effective_table_name, "user")

    def test_get_field(self):
        entity = make_entity("e1", "user", fields=[make_field("f1", "id", "int")])
        self.assertEqual(entity.get_field("f1").type, "int")
        self.assertIsNone(entity.get_field("missing"))


class TestProjectSchemaDocument(TestCase):
    """Test loading and dumping project documents"""

    def test_from_full_project_document(self):
        schema = ProjectSchema.from_dict(STORE_DOCUMENT)

        self.assertEqual(set(schema.entities), {"post-1", "tag-1"})
        post = schema.entities["post-1"]
        self.assertEqual(post.table_name, "posts")
        self.assertTrue(post.fields["post-id"].primary)
        self.assertFalse(post.fields["post-id"].nullable)
        self.assertEqual(schema.entities["tag-1"].status, EntityStatus.ARCHIVED)

        relation = schema.relations[0]
        self.assertEqual(relation.type, RelationType.MANY_TO_MANY)
        self.assertEqual(relation.source.entity_id, "post-1")
        self.assertEqual(relation.config.on_delete, CascadeType.CASCADE)
        self.assertEqual(relation.config.on_update, CascadeType.NO_ACTION)
        self.assertEqual(relation.join_table, JoinTableConfig("post_tags", "post_id", "tag_id"))
        self.assertEqual(relation.metadata.tags, ["blog"])

    def test_dump_and_reload_keeps_schema(self):
        schema = ProjectSchema.from_dict(STORE_DOCUMENT)
        self.assertEqual(ProjectSchema.from_dict(schema.to_dict()), schema)

    def test_relation_document_uses_wire_keys(self):
        user = make_entity("u", "user", "User")
        order = make_entity("o", "order", "Order")
        data = make_relation("r1", user, order, inverse_name="user").to_dict()

        self.assertEqual(data["from"], {"entityId": "u", "entityName": "User"})
        self.assertEqual(data["to"]["entityId"], "o")
        self.assertEqual(data["inverseName"], "user")
        self.assertEqual(data["config"]["onDelete"], "RESTRICT")
        self.assertNotIn("joinTable", data)

    def test_missing_config_gets_defaults(self):
        relation = Relation.from_dict({
            "id": "r1",
            "type": "oneToOne",
            "name": "profile",
            "from": {"entityId": "a"},
            "to": {"entityId": "b"},
        })
        self.assertFalse(relation.config.cascade)
        self.assertEqual(relation.config.on_delete, CascadeType.RESTRICT)
        self.assertTrue(relation.config.lazy)
        self.assertIsNone(relation.join_table)

    def test_unknown_relation_type_is_rejected(self):
        with self.assertRaises(SchemaLoadError) as ctx:
            Relation.from_dict({"id": "r1", "type": "manyToFew", "from": {"entityId": "a"}, "to": {"entityId": "b"}})
        self.assertIn("manyToFew", str(ctx.exception))

    def test_entity_without_entity_info_is_rejected(self):
        with self.assertRaises(SchemaLoadError):
            Entity.from_dict({"fields": {}})

    def test_non_mapping_relation_sections_are_rejected(self):
        base = {"id": "r1", "type": "manyToMany", "name": "tags", "from": {"entityId": "a"}, "to": {"entityId": "b"}}
        for key, value in (("config", ["bad"]), ("joinTable", "t"), ("metadata", "m")):
            with self.subTest(key=key):
                document = {"schema": {"entities": {}, "relations": [dict(base, **{key: value})]}}
                with self.assertRaises(SchemaLoadError) as ctx:
                    ProjectSchema.from_dict(document)
                self.assertIn("Expected a mapping", ctx.exception.message)

    def test_non_mapping_document_is_rejected(self):
        with self.assertRaises(SchemaLoadError):
            ProjectSchema.from_dict(["not", "a", "mapping"])

    def test_lookup_helpers(self):
        user = make_entity("u", "user")
        order = make_entity("o", "order")
        relation = make_relation("r1", user, order)
        schema = make_schema([user, order], [relation])

        self.assertIs(schema.get_entity("u"), user)
        self.assertIs(schema.get_relation("r1"), relation)
        self.assertIsNone(schema.get_relation("r2"))
        self.assertEqual(relation.edge, ("u", "o"))
        self.assertFalse(relation.is_self_referential)
