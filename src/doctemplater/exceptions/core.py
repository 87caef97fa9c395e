"""
Exception classes for doctemplater.

This module defines specific exception types for the different error conditions
that can occur while parsing comment directives, evaluating them against data
and rewriting the document tree of a template package.
"""

from dataclasses import dataclass


@dataclass
class ErrorContext:
    """
    Context information for error messages.

    Captures where in the template an error originated so that the offending
    template authoring can be located: the comment that carried the directive,
    its raw text, the function it invoked and the package part involved.

    Params:
        comment_id: Id of the comment whose directive caused the error
        directive_text: The raw directive text of that comment
        function_name: Function name for call directives
        part_name: Package part being processed when the error occurred
    """

    comment_id: str | None = None
    directive_text: str | None = None
    function_name: str | None = None
    part_name: str | None = None

    def format_location(self) -> str:
        """
        Format location information for inclusion in an error message.

        Returns:
            Indented multi-line string, empty when no information is available
        """
        lines = []

        if self.comment_id is not None:
            lines.append(f"  in comment {self.comment_id}")
        if self.function_name:
            lines.append(f"  calling function: {self.function_name}")
        if self.part_name:
            lines.append(f"  part: {self.part_name}")
        if self.directive_text is not None:
            lines.append(f"  directive: {self.directive_text}")

        return "\n".join(lines)


def _with_context(message: str, context: ErrorContext | None) -> str:
    if context is None:
        return message
    location_info = context.format_location()
    if not location_info:
        return message
    return f"{message}\n{location_info}"


class DocTemplaterError(Exception):
    """Base exception for all doctemplater errors."""

    pass


class DirectiveSyntaxError(DocTemplaterError):
    """Raised when a comment's text is not a valid directive."""

    def __init__(
        self,
        reason: str,
        raw: str,
        position: int | None = None,
        context: ErrorContext | None = None,
    ):
        """
        Initialize the exception.

        Params:
            reason: What is wrong with the directive (e.g. "Invalid key: 'a..b'")
            raw: The full raw directive string being parsed
            position: Offset of the offending character within the trimmed input
            context: Optional ErrorContext, typically carrying the comment id
        """
        self.reason = reason
        self.raw = raw
        self.position = position
        self.context = context

        primary_error = f"{reason} in directive '{raw}'"
        if position is not None:
            primary_error += f" at position {position}"
        super().__init__(_with_context(primary_error, context))

    def with_context(self, context: ErrorContext) -> "DirectiveSyntaxError":
        """Return a copy of this error carrying the given context."""
        return DirectiveSyntaxError(self.reason, self.raw, self.position, context)


class UndefinedFunctionError(DocTemplaterError):
    """Raised when a directive calls a function that was never registered."""

    def __init__(self, name: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            name: The unregistered function name
            context: Optional ErrorContext with the comment id
        """
        self.name = name
        self.context = context
        super().__init__(_with_context(f"Undefined function: {name}", context))


class DirectiveEvaluationError(DocTemplaterError):
    """Raised when a directive cannot be evaluated against its scope."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            message: Error message describing the evaluation failure
            context: Optional ErrorContext with comment id and function name
        """
        self.context = context
        super().__init__(_with_context(message, context))


class MalformedDocumentError(DocTemplaterError):
    """Raised when the document tree violates a structural precondition."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            message: Description of the structural problem
            context: Optional ErrorContext with comment id and part name
        """
        self.context = context
        super().__init__(_with_context(message, context))


class PackageError(DocTemplaterError):
    """Raised when the template package, its relationships or XML parts cannot be used."""

    pass


class TemplateStateError(DocTemplaterError):
    """Raised when a template is used after it has been saved or closed."""

    pass
