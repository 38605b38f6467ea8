"""
Mapping-code generation for relations.
"""

from .relation_code import (
    RelationCodeGenerator,
    generate_relation_code,
    setup_jinja_env,
)

__all__ = [
    'RelationCodeGenerator',
    'generate_relation_code',
    'setup_jinja_env',
]
