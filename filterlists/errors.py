"""
Error taxonomy for list resolution and rendering.

Access errors (NotFound, Forbidden) carry no detail meant for clients; the
route layer answers them with generic status-coded bodies. Data-consistency
errors carry operator-facing context and are logged.
"""


class ListError(Exception):
    """Base class for every error raised by the list pipeline."""


class NotFound(ListError):
    """Token does not resolve to a live list, whatever the reason."""


class Forbidden(ListError):
    """Owner is banned, or the caller does not own the list."""


class MalformedDefinition(ListError):
    """A filter definition source could not be split, decoded or validated."""
    def __init__(self, name, reason):
        self.name = name
        self.reason = reason
        super().__init__(f"Malformed filter definition '{name}': {reason}")


class UnknownFilter(ListError):
    """An instance references a filter that is not in the loaded corpus."""
    def __init__(self, name):
        self.name = name
        super().__init__(f"Unknown filter '{name}'")


class CorruptInstance(ListError):
    """A stored instance payload could not be decoded or does not fit its schema."""
    def __init__(self, filter_name, reason):
        self.filter_name = filter_name
        self.reason = reason
        super().__init__(f"Corrupt instance for filter '{filter_name}': {reason}")


class StoreError(ListError):
    """A persistence-layer failure, wrapped with context."""
