"""Centralized exceptions for docweave."""


class DocweaveError(Exception):
    """Base exception for all docweave errors."""


class ContentNotFoundError(DocweaveError):
    """Raised when a document exists under neither layout convention."""

    def __init__(self, path: str, candidates: list[str] | None = None) -> None:
        self.path = path
        self.candidates = candidates or []
        tried = f" (tried: {', '.join(self.candidates)})" if self.candidates else ""
        super().__init__(f"Document '/{path}' not found{tried}")


class CompileError(DocweaveError):
    """Raised when a document body cannot be compiled."""

    def __init__(self, path: str | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to compile '/{path or ''}': {reason}")


class ExecutionError(DocweaveError):
    """Raised when compiled code fails while materializing the tree.

    Compiled units are pure, so re-running one fails the same way; callers
    should not retry.
    """

    def __init__(self, path: str | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to execute compiled '/{path or ''}': {reason}")


class CacheIOError(DocweaveError):
    """Raised by cache backends when an entry cannot be read or written."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Cache entry '{key}' unusable: {reason}")


class ConfigLoadError(DocweaveError):
    """Raised when a configuration file cannot be loaded or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load or parse config at '{path}': {reason}")


class PayloadError(DocweaveError):
    """Raised when a page payload cannot be loaded or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid page payload '{path}': {reason}")


class UnresolvedComponentWarning(UserWarning):
    """Emitted when a serialized component name is missing from the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown component type: {name!r}; rendering children only")
