from __future__ import annotations


class EditError(ValueError):
    """Base class for every failure raised by the editing engine."""

    def add_context(self, context: str) -> None:
        """Prefix the message with ``context``, keeping the error's type."""
        self.args = (f"{context}: {self}",)


class CommandSyntaxError(EditError):
    """A command line, selector or literal could not be parsed."""


class SelectorError(CommandSyntaxError):
    pass


class LiteralError(CommandSyntaxError):
    def __init__(self, message: str, *, unrepresentable: bool = False) -> None:
        super().__init__(message)
        self.unrepresentable = unrepresentable


class NotFoundError(EditError):
    pass


class KindError(EditError):
    """The value at a selector has the wrong kind for the operation."""


class BoundsError(EditError):
    pass


class KeyExistsError(EditError):
    pass


class ConfirmationDeclined(EditError):
    pass


class DecodeError(EditError):
    def __init__(self, message: str, position: int | None = None) -> None:
        if position is not None:
            message = f"Syntax error at {position + 1}: {message}"
        super().__init__(message)
        self.position = position
