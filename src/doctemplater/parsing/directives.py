"""
Directive AST for comment-driven templates.

Every comment in a template is parsed once into one of the immutable variants
below. The evaluator dispatches on ``kind``.
"""

from enum import Enum

from attrs import frozen


class DirectiveType(Enum):
    """Type of directive."""

    EMPTY = "empty"
    NUMBER = "number"
    TEXT = "text"
    KEY = "key"
    FOREACH = "foreach"
    CALL = "call"


@frozen
class EmptyDirective:
    """Directive of an empty comment; resolves to an empty string."""

    kind = DirectiveType.EMPTY

    def __str__(self) -> str:
        return ""


@frozen
class NumberDirective:
    """Numeric literal, ``int`` unless a decimal point was consumed."""

    value: int | float
    kind = DirectiveType.NUMBER

    def __str__(self) -> str:
        return str(self.value)


@frozen
class TextDirective:
    """Quoted string literal."""

    value: str
    kind = DirectiveType.TEXT

    def __str__(self) -> str:
        escaped = self.value.replace('"', '\\"')
        return f'"{escaped}"'


@frozen
class KeyDirective:
    """Dotted lookup path (e.g. ``customer.address.city``)."""

    path: str
    kind = DirectiveType.KEY

    def __str__(self) -> str:
        return self.path


@frozen
class ForeachDirective:
    """Dotted path to a collection whose elements repeat the commented range."""

    path: str
    kind = DirectiveType.FOREACH

    def __str__(self) -> str:
        return f"{self.path}[]"


@frozen
class CallDirective:
    """Call of a registered function with directive arguments."""

    name: str
    arguments: tuple["Directive", ...] = ()
    kind = DirectiveType.CALL

    def __str__(self) -> str:
        args = ", ".join(str(argument) for argument in self.arguments)
        return f"{self.name}({args})"


Directive = (
    EmptyDirective
    | NumberDirective
    | TextDirective
    | KeyDirective
    | ForeachDirective
    | CallDirective
)
