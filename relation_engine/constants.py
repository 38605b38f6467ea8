"""
Centralized constants for the relation engine.

This module holds the default values, validation codes and the static
heuristic tables used by the suggestion engine and the validator. Keeping
them here makes the policy auditable and lets contributors tune it
without touching the algorithms.
"""

import re
from typing import Dict, List, Pattern, Tuple


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    # Relation behaviour
    CASCADE = False
    ON_DELETE = "RESTRICT"
    ON_UPDATE = "RESTRICT"
    NULLABLE = True
    EAGER = False
    LAZY = True

    # Metadata
    CREATED_BY = "user"

    # Suggestions
    SUGGESTION_CONFIDENCE = 0.8
    MIN_SUGGESTION_CONFIDENCE = 0.0

    # Conflict policy
    CASCADE_EDGES_ONLY = False
    BLOCKING_CONFLICTS = ["duplicate", "naming"]

    # Code generation
    INDENT = 2


class NamingDefaults:
    """Naming templates for synthesized identifiers."""

    JOIN_TABLE_PREFIX = "relation"
    JOIN_COLUMN_SUFFIX = "_id"
    PLURAL_SUFFIX = "s"


# =============================================================================
# VALIDATION CODES
# =============================================================================

class ErrorCodes:
    """Codes attached to blocking validation errors."""

    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    INVALID_NAME = "INVALID_NAME"
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    FK_TYPE_MISMATCH = "FK_TYPE_MISMATCH"
    MISSING_JOIN_TABLE = "MISSING_JOIN_TABLE"
    INVALID_JOIN_TABLE_NAME = "INVALID_JOIN_TABLE_NAME"
    INVALID_JOIN_COLUMN = "INVALID_JOIN_COLUMN"
    INVALID_INVERSE_JOIN_COLUMN = "INVALID_INVERSE_JOIN_COLUMN"
    JOIN_TABLE_NAME_CONFLICT = "JOIN_TABLE_NAME_CONFLICT"
    JOIN_COLUMN_CONFLICT = "JOIN_COLUMN_CONFLICT"


class WarningCodes:
    """Codes attached to non-blocking validation warnings."""

    MULTIPLE_ONE_TO_ONE = "MULTIPLE_ONE_TO_ONE"


# =============================================================================
# DISPLAY NAMES
# =============================================================================

RELATION_TYPE_DISPLAY_NAMES: Dict[str, str] = {
    "oneToOne": "One-to-One",
    "oneToMany": "One-to-Many",
    "manyToOne": "Many-to-One",
    "manyToMany": "Many-to-Many",
}

CASCADE_TYPE_DISPLAY_NAMES: Dict[str, str] = {
    "CASCADE": "Cascade",
    "SET NULL": "Set Null",
    "RESTRICT": "Restrict",
    "NO ACTION": "No Action",
}


# =============================================================================
# SUGGESTION HEURISTICS
# =============================================================================

# Synonym groups: two entity names matching the same pattern are likely related.
NAME_PATTERN_GROUPS: List[Tuple[str, Pattern[str]]] = [
    ("user", re.compile(r"user|member", re.IGNORECASE)),
    ("order", re.compile(r"order|purchase", re.IGNORECASE)),
    ("product", re.compile(r"product|item", re.IGNORECASE)),
    ("category", re.compile(r"category|type", re.IGNORECASE)),
    ("role", re.compile(r"role|permission", re.IGNORECASE)),
    ("post", re.compile(r"post|article", re.IGNORECASE)),
    ("comment", re.compile(r"comment|reply", re.IGNORECASE)),
]

# (owner keyword, dependent keyword, relation name, inverse relation name)
KNOWN_ASSOCIATIONS: List[Tuple[str, str, str, str]] = [
    ("user", "order", "orders", "user"),
    ("user", "role", "roles", "users"),
    ("product", "category", "categories", "products"),
]


# =============================================================================
# FIELD TYPE COMPATIBILITY
# =============================================================================

# Foreign-key columns are compatible when both types fall in the same family.
FIELD_TYPE_FAMILIES: Dict[str, str] = {
    # Integers
    "int": "integer",
    "int2": "integer",
    "int4": "integer",
    "int8": "integer",
    "integer": "integer",
    "tinyint": "integer",
    "smallint": "integer",
    "mediumint": "integer",
    "bigint": "integer",
    "increment": "integer",
    "serial": "integer",
    "bigserial": "integer",
    "number": "integer",

    # Exact and approximate numerics
    "decimal": "decimal",
    "numeric": "decimal",
    "float": "float",
    "double": "float",
    "double precision": "float",
    "real": "float",

    # Strings
    "char": "string",
    "varchar": "string",
    "nvarchar": "string",
    "character varying": "string",
    "string": "string",
    "text": "string",

    # Identifiers
    "uuid": "uuid",
    "guid": "uuid",
    "uniqueidentifier": "uuid",
}
