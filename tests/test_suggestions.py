"""
Tests for heuristic relation suggestions.
"""

from unittest import TestCase

from builders import make_entity
from relation_engine.domain.models import RelationType
from relation_engine.domain.suggestions import (
    SuggestionEngine,
    find_known_association,
    find_shared_pattern,
    generate_inverse_relation_name,
    generate_relation_name,
    suggest_relations,
)


class TestNameHeuristics(TestCase):
    """Test the name matchers"""

    def test_known_association_is_directional(self):
        self.assertIsNotNone(find_known_association("User", "Order"))
        self.assertIsNone(find_known_association("Order", "User"))

    def test_shared_pattern(self):
        self.assertEqual(find_shared_pattern("Post", "Article"), "post")
        self.assertEqual(find_shared_pattern("OrderLine", "Purchase"), "order")
        self.assertIsNone(find_shared_pattern("Invoice", "Tag"))

    def test_relation_names(self):
        self.assertEqual(generate_relation_name("User", "Order"), "orders")
        self.assertEqual(generate_inverse_relation_name("User", "Order"), "user")
        self.assertEqual(generate_relation_name("Product", "Category"), "categories")
        self.assertEqual(generate_inverse_relation_name("Product", "Category"), "products")

    def test_fallback_relation_names(self):
        self.assertEqual(generate_relation_name("Post", "Article"), "articles")
        self.assertEqual(generate_inverse_relation_name("Blog Post", "Article"), "blog_post")


class TestSuggestionEngine(TestCase):
    """Test SuggestionEngine.suggest_relations"""

    def test_user_and_order(self):
        user = make_entity("u", "user", "User")
        order = make_entity("o", "order", "Order")

        suggestions = suggest_relations([user, order])

        self.assertEqual(len(suggestions), 1)
        suggestion = suggestions[0]
        self.assertEqual(suggestion.type, RelationType.ONE_TO_MANY)
        self.assertEqual(suggestion.from_entity_id, "u")
        self.assertEqual(suggestion.to_entity_id, "o")
        self.assertEqual(suggestion.confidence, 0.8)
        self.assertEqual(suggestion.suggested_name, "orders")
        self.assertEqual(suggestion.suggested_inverse_name, "user")

    def test_known_association_fixes_direction(self):
        order = make_entity("o", "order", "Order")
        user = make_entity("u", "user", "User")

        suggestions = suggest_relations([order, user])

        self.assertEqual(len(suggestions), 1)
        self.assertEqual((suggestions[0].from_entity_id, suggestions[0].to_entity_id), ("u", "o"))

    def test_synonym_pair_goes_first_to_second(self):
        post = make_entity("p", "post", "Post")
        article = make_entity("a", "article", "Article")

        suggestions = suggest_relations([post, article])

        self.assertEqual(len(suggestions), 1)
        self.assertEqual(suggestions[0].from_entity_id, "p")
        self.assertEqual(suggestions[0].suggested_name, "articles")
        self.assertEqual(suggestions[0].suggested_inverse_name, "post")
        self.assertIn("Post", suggestions[0].reason)

    def test_unrelated_entities(self):
        entities = [make_entity("i", "invoice", "Invoice"), make_entity("t", "tag", "Tag")]
        self.assertEqual(suggest_relations(entities), [])

    def test_fewer_than_two_entities(self):
        self.assertEqual(suggest_relations([]), [])
        self.assertEqual(suggest_relations([make_entity("u", "user", "User")]), [])

    def test_entity_is_never_paired_with_itself(self):
        user = make_entity("u", "user", "User")
        self.assertEqual(suggest_relations([user, user]), [])

    def test_uses_code_when_label_is_missing(self):
        suggestions = suggest_relations([make_entity("u", "user"), make_entity("o", "order")])
        self.assertEqual(suggestions[0].suggested_name, "orders")

    def test_confidence_and_order(self):
        entities = [
            make_entity("u", "user", "User"),
            make_entity("o", "order", "Order"),
            make_entity("r", "role", "Role"),
            make_entity("x", "invoice", "Invoice"),
        ]

        suggestions = SuggestionEngine(confidence=0.5).suggest_relations(entities)

        self.assertEqual(
            [(s.from_entity_id, s.to_entity_id) for s in suggestions],
            [("u", "o"), ("u", "r")],
        )
        self.assertTrue(all(0.0 <= s.confidence <= 1.0 for s in suggestions))
        self.assertTrue(all(s.confidence == 0.5 for s in suggestions))

    def test_suggestion_becomes_request(self):
        suggestion = suggest_relations([make_entity("u", "user", "User"), make_entity("r", "role", "Role")])[0]

        request = suggestion.to_request()

        self.assertEqual(request.from_entity_id, "u")
        self.assertEqual(request.to_entity_id, "r")
        self.assertEqual(request.type, RelationType.ONE_TO_MANY)
        self.assertEqual(request.name, "roles")
        self.assertEqual(request.inverse_name, "users")

    def test_suggestion_to_dict(self):
        data = suggest_relations([make_entity("u", "user", "User"), make_entity("o", "order", "Order")])[0].to_dict()
        self.assertEqual(data["type"], "oneToMany")
        self.assertEqual(data["fromEntityId"], "u")
        self.assertEqual(data["suggestedName"], "orders")
