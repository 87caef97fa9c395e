"""
Resolution of comment directives against scope chains.

This module holds the CommentsResolver, which parses every comment of a
template up front and evaluates a comment's directive against a ScopeChain to
produce either a scalar value to print or a sequence of child scopes to repeat
the commented range with.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from doctemplater.exceptions import (
    DirectiveEvaluationError,
    DirectiveSyntaxError,
    ErrorContext,
    UndefinedFunctionError,
)
from doctemplater.execution.scopes import ScopeChain
from doctemplater.models import RenderOptions
from doctemplater.parsing.directives import (
    CallDirective,
    Directive,
    DirectiveType,
    EmptyDirective,
)
from doctemplater.parsing.parser import DirectiveParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScalarValue:
    """A single value to be written into the document."""

    data: Any


@dataclass(frozen=True)
class SequenceValue:
    """
    Child scopes, one per repetition of the commented range.

    Children link to their parent scope weakly; parent keeps it alive for as
    long as this result is held.
    """

    scopes: tuple[ScopeChain, ...]
    parent: ScopeChain | None = None


ResolvedValue = ScalarValue | SequenceValue


class CommentsResolver:
    """Evaluates parsed comment directives against scope chains."""

    def __init__(
        self,
        comments: Mapping[str, str],
        functions: Mapping[str, Callable[..., Any]] | None = None,
        options: RenderOptions | None = None,
    ):
        """
        Parse all comments.

        Params:
            comments: Raw comment text keyed by comment id
            functions: Initial function registry (name -> callable)
            options: Evaluation options

        Raises:
            DirectiveSyntaxError: If any comment is not a valid directive; the
                error carries the offending comment id
        """
        self.options = options or RenderOptions()
        self._functions: dict[str, Callable[..., Any]] = dict(functions or {})

        parser = DirectiveParser()
        directives: dict[str, Directive] = {}
        for comment_id, raw in comments.items():
            try:
                directives[str(comment_id)] = parser.parse(raw)
            except DirectiveSyntaxError as e:
                raise e.with_context(
                    ErrorContext(comment_id=str(comment_id), directive_text=raw)
                ) from e

        self._directives = directives
        logger.debug("Prepared %d comment directives", len(directives))

    @classmethod
    def from_directives(
        cls,
        directives: Mapping[str, Directive],
        functions: Mapping[str, Callable[..., Any]] | None = None,
        options: RenderOptions | None = None,
    ) -> "CommentsResolver":
        """
        Build a resolver from already parsed directives.

        Params:
            directives: Directive per comment id
            functions: Initial function registry (name -> callable)
            options: Evaluation options

        Returns:
            A resolver evaluating the given directives
        """
        resolver = cls({}, functions, options)
        resolver._directives = {str(key): value for key, value in directives.items()}
        return resolver

    @property
    def directives(self) -> Mapping[str, Directive]:
        """Read-only view of parsed directives keyed by comment id."""
        return MappingProxyType(self._directives)

    def get_directive(self, comment_id: str) -> Directive:
        """Directive for a comment id; unknown ids yield EmptyDirective."""
        return self._directives.get(str(comment_id), EmptyDirective())

    def register_function(self, name: str, handler: Callable[..., Any]) -> None:
        """
        Bind a function name usable in call directives.

        Registering an existing name replaces the previous binding.

        Params:
            name: Name used in directives, e.g. "upper" for ``upper(name)``
            handler: Callable receiving the resolved positional arguments
        """
        self._functions[name] = handler

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def resolve(self, comment_id: str, scope: ScopeChain) -> ResolvedValue:
        """
        Evaluate the directive of one comment.

        Params:
            comment_id: Comment id as found on the range markers
            scope: Scope active where the comment range occurs

        Returns:
            ScalarValue or SequenceValue

        Raises:
            UndefinedFunctionError: If a call directive names an unknown function
            DirectiveEvaluationError: If a registered function fails
        """
        comment_id = str(comment_id)
        directive = self.get_directive(comment_id)
        return self._resolve_directive(directive, scope, comment_id)

    def _resolve_directive(
        self, directive: Directive, scope: ScopeChain, comment_id: str
    ) -> ResolvedValue:
        kind = directive.kind

        if kind == DirectiveType.KEY:
            return ScalarValue(scope.find(directive.path))
        if kind in (DirectiveType.NUMBER, DirectiveType.TEXT):
            return ScalarValue(directive.value)
        if kind == DirectiveType.FOREACH:
            items = self._as_items(scope.find(directive.path))
            return SequenceValue(tuple(scope.child(item) for item in items), scope)
        if kind == DirectiveType.CALL:
            return ScalarValue(self._call(directive, scope, comment_id))

        return ScalarValue("")

    def _as_items(self, data: Any) -> list[Any]:
        """
        Normalize foreach data into a list of elements.

        Mappings contribute their values in iteration order, sequences are
        used as they are, anything else (None included) becomes one element.
        """
        if isinstance(data, Mapping):
            return list(data.values())
        if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
            return list(data)
        return [data]

    def _call(self, directive: CallDirective, scope: ScopeChain, comment_id: str) -> Any:
        name = directive.name
        if name not in self._functions:
            raise UndefinedFunctionError(
                name, ErrorContext(comment_id=comment_id, function_name=name)
            )

        arguments = []
        for argument in directive.arguments:
            resolved = self._resolve_directive(argument, scope, comment_id)
            if isinstance(resolved, SequenceValue):
                if self.options.strict_call_arguments:
                    raise DirectiveEvaluationError(
                        f"Argument '{argument}' of {name}() resolves to a collection",
                        ErrorContext(
                            comment_id=comment_id,
                            directive_text=str(directive),
                            function_name=name,
                        ),
                    )
                arguments.append(None)
            else:
                arguments.append(resolved.data)

        try:
            return self._functions[name](*arguments)
        except Exception as e:
            raise DirectiveEvaluationError(
                f"Function {name}() failed: {e}",
                ErrorContext(
                    comment_id=comment_id,
                    directive_text=str(directive),
                    function_name=name,
                ),
            ) from e
