"""
Relation mapping-code generator.

Renders a relation into TypeORM-style decorator source text. The output
is a per-relation fragment; assembling whole entity files is left to the
external code-generation collaborator.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from relation_engine.constants import DefaultConfig
from relation_engine.domain.models import CascadeType, Relation, RelationType
from relation_engine.domain.naming import (
    derive_inverse_property,
    to_class_name,
    to_variable_name,
)
from relation_engine.exceptions import CodeGenerationError

logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "relation"

TEMPLATE_NAMES: Dict[RelationType, str] = {
    RelationType.ONE_TO_ONE: "one_to_one.ts.j2",
    RelationType.ONE_TO_MANY: "one_to_many.ts.j2",
    RelationType.MANY_TO_ONE: "many_to_one.ts.j2",
    RelationType.MANY_TO_MANY: "many_to_many.ts.j2",
}

# Decorators placed on the side holding the foreign key
OWNING_SIDE_TYPES = (RelationType.ONE_TO_ONE, RelationType.MANY_TO_ONE)

# TypeORM needs the inverse side for these decorators
INVERSE_REQUIRED_TYPES = (RelationType.ONE_TO_MANY, RelationType.MANY_TO_MANY)


def quote_string(value: Any) -> str:
    """Render a value as a single-quoted TypeScript string literal."""
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment for relation templates."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=False,  # Output is TypeScript, not markup
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters["quote"] = quote_string
    return env


class RelationCodeGenerator:
    """
    Generates decorator code for relations.

    One template per relation type; the generator only prepares the
    template context (class names, inverse property and options).
    """

    def __init__(self, indent: int = DefaultConfig.INDENT, env: Optional[Environment] = None):
        self.indent = " " * indent
        self.env = env or setup_jinja_env()

    def generate(self, relation: Relation) -> str:
        """
        Render the mapping code for a relation.

        Args:
            relation: A relation accepted by the validator

        Returns:
            Decorator source text

        Raises:
            CodeGenerationError: If the relation lacks data its type requires
        """
        if relation.type.requires_join_table and relation.join_table is None:
            raise CodeGenerationError(
                f"Relation '{relation.name}' is many-to-many but has no join table",
                relation_id=relation.id,
                relation_type=relation.type.value,
            )

        template = self.env.get_template(TEMPLATE_NAMES[relation.type])
        code = template.render(self.build_context(relation))
        logger.debug(f"Generated {relation.type.value} code for relation '{relation.name}'")
        return code

    def build_context(self, relation: Relation) -> Dict[str, Any]:
        target_class = to_class_name(relation.target.entity_name)
        return {
            "name": relation.name,
            "target_class": target_class,
            "inverse": self._inverse(relation, target_class),
            "options": self._options(relation),
            "join_table": relation.join_table,
            "indent": self.indent,
        }

    def _inverse(self, relation: Relation, target_class: str) -> Optional[Dict[str, str]]:
        inverse_property = relation.inverse_name
        if not inverse_property and relation.type in INVERSE_REQUIRED_TYPES:
            inverse_property = derive_inverse_property(relation.type, relation.source.entity_name)
        if not inverse_property:
            return None
        return {"var": to_variable_name(target_class), "property": inverse_property}

    def _options(self, relation: Relation) -> List[str]:
        config = relation.config
        options = []
        if config.cascade:
            options.append("cascade: true")
        if config.eager:
            options.append("eager: true")
        if relation.type in OWNING_SIDE_TYPES:
            if not config.nullable:
                options.append("nullable: false")
            if config.on_delete is not CascadeType.RESTRICT:
                options.append(f"onDelete: {quote_string(config.on_delete.value)}")
            if config.on_update is not CascadeType.RESTRICT:
                options.append(f"onUpdate: {quote_string(config.on_update.value)}")
        return options


def generate_relation_code(relation: Relation, indent: int = DefaultConfig.INDENT) -> str:
    """Render the mapping code for a relation."""
    return RelationCodeGenerator(indent=indent).generate(relation)
