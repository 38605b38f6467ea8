"""
Naming convention utilities for the relation engine.

This module converts entity display names into identifiers and builds the
synthesized names used for join tables, join columns and navigation
properties.
"""

import re
from typing import Optional
import inflect

from relation_engine.constants import NamingDefaults
from relation_engine.domain.models import RelationType


# Initialize inflect engine for pluralization
p = inflect.engine()


def to_snake_case(name: str) -> str:
    """
    Convert a display name, CamelCase or PascalCase string to snake_case.

    Runs of characters that are not letters or digits collapse into a
    single underscore.

    Args:
        name: The string to convert to snake_case

    Returns:
        The converted snake_case string

    Example:
        >>> to_snake_case("UserAccount")
        'user_account'
        >>> to_snake_case("Blog Post")
        'blog_post'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub(r"[\W_]+", "_", name).strip("_")
    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    name = re.sub("_+", "_", name)
    return name.lower()


def to_class_name(name: str) -> str:
    """
    Turn an entity display name into a class identifier.

    Names that already are identifiers are kept verbatim so that
    'OrderItem' stays 'OrderItem'.

    Example:
        >>> to_class_name("order item")
        'OrderItem'
    """
    if name.isidentifier():
        return name
    words = [w for w in re.split(r"[\W_]+", name) if w]
    if not words:
        return "Entity"
    class_name = "".join(w[:1].upper() + w[1:] for w in words)
    if class_name[0].isdigit():
        class_name = f"_{class_name}"
    return class_name


def to_variable_name(class_name: str) -> str:
    """Lower the first letter of a class name, e.g. 'OrderItem' -> 'orderItem'."""
    return class_name[:1].lower() + class_name[1:]


def generate_join_table_name(from_entity_id: str, to_entity_id: str) -> str:
    """
    Generate the default join-table name for a many-to-many relation.

    Hyphens (common in UUID entity ids) are replaced by underscores.
    """
    return f"{NamingDefaults.JOIN_TABLE_PREFIX}_{from_entity_id}_{to_entity_id}".replace("-", "_")


def generate_join_column_name(entity_id: str) -> str:
    """Generate a join-column name referencing the given entity."""
    return f"{entity_id}{NamingDefaults.JOIN_COLUMN_SUFFIX}"


def generate_default_relation_name(to_name: str) -> str:
    """Fallback forward name: the target's snake_case name with an 's' suffix."""
    return f"{to_snake_case(to_name)}{NamingDefaults.PLURAL_SUFFIX}"


def generate_default_inverse_name(from_name: str) -> str:
    """Fallback inverse name: the source's snake_case name."""
    return to_snake_case(from_name)


def derive_inverse_property(relation_type: RelationType, source_entity_name: str) -> str:
    """
    Derive the inverse navigation property for a relation without one.

    The inverse side of ONE_TO_MANY and ONE_TO_ONE points back at a single
    source row; the inverse side of MANY_TO_ONE and MANY_TO_MANY holds a
    collection, so it is pluralized.

    Args:
        relation_type: Type of the forward relation
        source_entity_name: Display name of the source entity

    Returns:
        camelCase property name, e.g. 'user' or 'blogPosts'
    """
    base = to_variable_name(to_class_name(source_entity_name))
    if relation_type in (RelationType.MANY_TO_ONE, RelationType.MANY_TO_MANY):
        return pluralize(base)
    return base


def pluralize(word: str) -> str:
    """
    Pluralize a word using inflect, falling back to an 's' suffix.
    """
    if not word:
        return ""
    plural: Optional[str] = p.plural(word)
    if plural:
        return plural
    return word + NamingDefaults.PLURAL_SUFFIX
