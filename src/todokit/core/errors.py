"""Typed failures raised by the core."""


class TodoError(Exception):
    """Base class for every recoverable todokit failure."""

    def __init__(self, message: str, value: str = ""):
        super().__init__(message)
        self.value = value


class InvalidExpression(TodoError, ValueError):
    """Malformed date expression, recurrence spec or search pattern."""

    def __init__(self, value: str, reason: str = ""):
        message = f"invalid expression '{value}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, value)


class InvalidRange(TodoError, ValueError):
    """Malformed id, id range or id list in a filter rule."""

    def __init__(self, value: str, reason: str = ""):
        message = f"invalid range '{value}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, value)
