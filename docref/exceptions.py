"""Custom exceptions for relationship operations."""


class DocRefError(Exception):
    """Base exception for Doc-Ref errors."""

    pass


class ConfigurationError(DocRefError):
    """Raised when a relationship or its inverse is not declared correctly."""

    def __init__(self, model_name: str, relation_name: str, message: str | None = None):
        if message is None:
            message = f"{model_name} has no relationship named '{relation_name}'"
        super().__init__(message)
        self.model_name = model_name
        self.relation_name = relation_name


class RelationKindError(ConfigurationError):
    """Raised when an inverse declaration disagrees with the relationship that names it."""

    pass


class StoreError(DocRefError):
    """Raised when a document store operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class InstantiationError(DocRefError):
    """Raised when a document cannot be built from the given attributes."""

    def __init__(self, model_name: str, original_error: Exception | None = None):
        message = f"Failed to instantiate {model_name}"
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(message)
        self.model_name = model_name
        self.original_error = original_error
