"""Exception types raised by the copy pipeline and its collaborators."""

from typing import Any


class CopyError(Exception):
    """Base class for copy failures."""

    pass


class RecordNotFoundError(CopyError):
    """Raised when the root record does not resolve at fetch time."""

    def __init__(self, model: str, record_id: Any) -> None:
        self.model = model
        self.record_id = record_id
        super().__init__(f"{model} record '{record_id}' not found")


class InsertRejectedError(CopyError):
    """Raised when the persistence layer refuses a cascade save."""

    def __init__(self, model: str, detail: str = "") -> None:
        self.model = model
        self.detail = detail
        message = f"Saving {model} copy was rejected"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnknownModelError(KeyError):
    """Raised when a model identifier is not declared in the association index."""

    def __init__(self, model: str, available: list[str] | None = None) -> None:
        self.model = model
        self.available = available or []
        super().__init__(model)

    def __str__(self) -> str:
        return (
            f"Model '{self.model}' not declared. "
            f"Available: {', '.join(self.available) or '(none)'}"
        )


class ConfigError(ValueError):
    """Raised when a configuration file has invalid content."""

    pass
