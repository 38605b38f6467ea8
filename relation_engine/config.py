"""
Configuration loading and validation for the relation engine.

The configuration is a small YAML document validated by pydantic. Every
option has a default, so running without a configuration file is the
normal case.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Dict, Any, Literal

import yaml
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    ConfigDict,
)

from relation_engine.constants import DefaultConfig
from relation_engine.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CascadeLiteral = Literal["CASCADE", "SET NULL", "RESTRICT", "NO ACTION"]
ConflictLiteral = Literal["duplicate", "circular", "naming"]


# --- Pydantic Models for Configuration Schema ---
class RelationDefaultsSchema(BaseModel):
    """Defaults applied by the relation factory to omitted config keys."""

    cascade: bool = Field(default=DefaultConfig.CASCADE, description="Cascade persistence operations.")
    on_delete: CascadeLiteral = Field(
        default=DefaultConfig.ON_DELETE, description="Referential action on delete."
    )
    on_update: CascadeLiteral = Field(
        default=DefaultConfig.ON_UPDATE, description="Referential action on update."
    )
    nullable: bool = Field(default=DefaultConfig.NULLABLE, description="Whether the relation may be empty.")
    eager: bool = Field(default=DefaultConfig.EAGER, description="Load the relation eagerly.")
    lazy: bool = Field(default=DefaultConfig.LAZY, description="Load the relation lazily.")

    model_config = ConfigDict(extra="ignore")

    @field_validator("on_delete", "on_update", mode="before")
    @classmethod
    def normalize_cascade(cls, v: Any) -> Any:
        """Accept 'set_null' / 'no-action' style spellings and enum members."""
        if isinstance(v, Enum):
            v = v.value
        if isinstance(v, str):
            return v.strip().upper().replace("_", " ").replace("-", " ")
        return v


class EngineConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    relation_defaults: RelationDefaultsSchema = Field(
        default_factory=RelationDefaultsSchema,
        description="Defaults for relation behaviour when a request omits them.",
    )
    created_by: str = Field(
        default=DefaultConfig.CREATED_BY,
        min_length=1,
        description="Author recorded in relation metadata.",
    )
    suggestion_confidence: float = Field(
        default=DefaultConfig.SUGGESTION_CONFIDENCE,
        ge=0.0,
        le=1.0,
        description="Confidence attached to name-pattern suggestions.",
    )
    min_suggestion_confidence: float = Field(
        default=DefaultConfig.MIN_SUGGESTION_CONFIDENCE,
        ge=0.0,
        le=1.0,
        description="Suggestions below this confidence are dropped by the engine facade.",
    )
    cascade_edges_only: bool = Field(
        default=DefaultConfig.CASCADE_EDGES_ONLY,
        description="Only relations with cascade enabled take part in cycle detection.",
    )
    blocking_conflicts: List[ConflictLiteral] = Field(
        default_factory=lambda: list(DefaultConfig.BLOCKING_CONFLICTS),
        description="Conflict types that prevent a relation from being accepted.",
    )
    indent: int = Field(
        default=DefaultConfig.INDENT,
        ge=1,
        le=8,
        description="Spaces used to indent generated mapping code.",
    )

    model_config = ConfigDict(extra="ignore")

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access."""
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)

    @field_validator("blocking_conflicts")
    @classmethod
    def deduplicate_conflicts(cls, v: List[str]) -> List[str]:
        """Keep the first occurrence of each conflict type."""
        seen = []
        for item in v:
            if item not in seen:
                seen.append(item)
        return seen


# --- Validation Function ---
def validate_and_parse_config(config_dict: Dict[str, Any], config_file: Optional[str] = None) -> EngineConfigSchema:
    """
    Validates a raw configuration dictionary against the EngineConfigSchema.

    Raises:
        ConfigurationError: listing every offending location
    """
    try:
        validated_config = EngineConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully against schema.")
        return validated_config
    except ValidationError as e:
        problems = []
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
            problems.append(f"{loc_str}: {error.get('msg', 'Unknown validation error')}")
        raise ConfigurationError(
            f"Configuration validation failed: {'; '.join(problems)}",
            config_file=config_file,
            context={"errors": problems},
        ) from e


def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> EngineConfigSchema:
    """
    Loads configuration from a YAML file, applies overrides and validates the result.

    A missing file is not an error: defaults are used and a warning is logged.

    Args:
        config_path: Optional path to a YAML configuration file
        overrides: Values taking precedence over the file (None values are ignored)

    Returns:
        Validated configuration
    """
    raw_config: Dict[str, Any] = {}

    if config_path:
        config_file = Path(config_path)
        if config_file.is_file():
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    yaml_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Error parsing YAML file {config_path}: {e}", config_file=config_path
                ) from e
            if isinstance(yaml_config, dict):
                raw_config.update(yaml_config)
                logger.debug(f"Loaded configuration from {config_path}")
            elif yaml_config is not None:
                raise ConfigurationError(
                    f"Content in config file {config_path} is not a mapping",
                    config_file=config_path,
                )
        else:
            logger.warning(f"Config file not found at {config_path}. Using defaults.")

    if overrides:
        applied = {key: value for key, value in overrides.items() if value is not None}
        raw_config.update(applied)
        if applied:
            logger.debug(f"Overridden config keys: {set(applied)}")

    return validate_and_parse_config(raw_config, config_file=config_path)
