"""Error types raised by the data-access layer."""


class ThreadlineError(Exception):
    """Base exception for all Threadline errors."""


class RepositoryError(ThreadlineError):
    """A persistence or query failure inside a repository operation.

    The message keeps the operation prefix callers have always seen
    (``"Failed to fetch user: <original message>"``) while the original
    exception stays reachable through ``original`` and ``__cause__``.
    """

    def __init__(self, operation: str, original: BaseException | str = "") -> None:
        self.operation = operation
        self.original = original
        detail = str(original)
        message = f"{operation}: {detail}" if detail else operation
        super().__init__(message)


class NotFoundError(ThreadlineError):
    """A referenced document does not exist."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found")
