"""
Custom exception hierarchy for the relation engine.

Every exception carries a human-readable message plus structured context
and recovery suggestions, so callers (UI layer, CLI) can render them
without parsing strings.
"""

from typing import Dict, Any, Optional, List


class RelationEngineError(Exception):
    """
    Base exception for all relation engine errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [super().__str__()]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class EntityNotFoundError(RelationEngineError):
    """Raised when a relation request references an entity missing from the schema."""

    def __init__(self, message: str, entity_ids: Optional[List[str]] = None, **kwargs):
        context = kwargs.get('context', {})
        if entity_ids:
            context['entity_ids'] = entity_ids

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Select source and target entities that exist in the project",
                "Reload the project snapshot if the entity was just created",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="ENTITY_NOT_FOUND"
        )


class RelationValidationError(RelationEngineError):
    """Raised when a caller asks for an invalid validation result to be enforced."""

    def __init__(self, message: str, relation_id: str = None, **kwargs):
        context = kwargs.get('context', {})
        if relation_id:
            context['relation_id'] = relation_id

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Review the reported errors and correct the relation definition",
                "Make sure many-to-many relations define a complete join table",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="VALIDATION_ERROR"
        )


class CodeGenerationError(RelationEngineError):
    """Raised when mapping code cannot be generated for a relation."""

    def __init__(self, message: str, relation_id: str = None, relation_type: str = None, **kwargs):
        context = kwargs.get('context', {})
        if relation_id:
            context['relation_id'] = relation_id
        if relation_type:
            context['relation_type'] = relation_type

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Validate the relation before generating code",
                "Check that many-to-many relations have a join table",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CODE_GENERATION_ERROR"
        )


class ConfigurationError(RelationEngineError):
    """Raised when configuration is invalid or cannot be read."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify option names and value ranges",
                "Check the documentation for configuration examples"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class SchemaLoadError(RelationEngineError):
    """Raised when a project document cannot be turned into a schema snapshot."""

    def __init__(self, message: str, source: str = None, **kwargs):
        context = kwargs.get('context', {})
        if source:
            context['source'] = source

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check that the document contains 'entities' and 'relations'",
                "Export the project again from the designer",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="SCHEMA_LOAD_ERROR"
        )
