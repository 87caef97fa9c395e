"""
Comment-driven .docx templates.

A Template opens a word-processing package, reads every reviewer comment as a
directive, strips the comments and renders the main document against
caller-supplied data:

    with Template("invoice.docx") as template:
        template.register_function("money", lambda v: f"{v:.2f} EUR")
        template.render({"customer": {"name": "Alice"}, "lines": [...]})
        template.save("invoice-alice.docx")
"""

import logging
import os
import weakref
from collections.abc import Callable, Mapping
from typing import IO, Any

from doctemplater.exceptions import PackageError, TemplateStateError
from doctemplater.execution.resolution import CommentsResolver
from doctemplater.execution.scopes import ScopeChain
from doctemplater.models import RenderOptions
from doctemplater.package import PACKAGE_RELS, DocxPackage, rels_part_for
from doctemplater.rendering.engine import TreeRenderer
from doctemplater.rendering.ooxml import (
    COMMENT,
    ID,
    TEXT,
    TYPE_COMMENTS,
    TYPE_DOCUMENT,
)

logger = logging.getLogger(__name__)


class Template:
    """A .docx template whose comments are rendering directives."""

    def __init__(
        self,
        source: str | os.PathLike | IO[bytes],
        functions: Mapping[str, Callable[..., Any]] | None = None,
        options: RenderOptions | None = None,
    ):
        """
        Open a template and parse its comments.

        The package is released again if anything fails here.

        Params:
            source: Path or binary file object of the template
            functions: Functions callable from directives, by name
            options: Rendering options

        Raises:
            PackageError: If the package, its main document or its comments
                cannot be found or read
            DirectiveSyntaxError: If any comment is not a valid directive
        """
        self.source = source
        self.options = options or RenderOptions()
        self._package = DocxPackage.open(source)
        self._finalizer = weakref.finalize(self, self._package.close)

        try:
            self._document_part = self._package.resolve_relationship_target(
                PACKAGE_RELS, TYPE_DOCUMENT
            )
            if self._document_part is None:
                raise PackageError("No document found in template")

            comments_part = self._package.resolve_relationship_target(
                rels_part_for(self._document_part), TYPE_COMMENTS
            )
            if comments_part is None:
                raise PackageError("No comments found in template")

            comments = self._extract_comments(comments_part)
            self._resolver = CommentsResolver(comments, functions, self.options)
        except BaseException:
            self.close()
            raise

        self._renderer = TreeRenderer(self._resolver)

    @classmethod
    def open(
        cls,
        source: str | os.PathLike | IO[bytes],
        functions: Mapping[str, Callable[..., Any]] | None = None,
        options: RenderOptions | None = None,
    ) -> "Template":
        return cls(source, functions, options)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def resolver(self) -> CommentsResolver:
        return self._resolver

    def _extract_comments(self, comments_part: str) -> dict[str, str]:
        """
        Collect comment texts by id and remove the comments from the package.

        Returns:
            Raw comment text keyed by comment id
        """
        root = self._package.read_part(comments_part)
        comments: dict[str, str] = {}
        for comment in list(root.iter(COMMENT)):
            text = "".join(t.text or "" for t in comment.iter(TEXT))
            comments[comment.get(ID)] = text
            comment.getparent().remove(comment)

        self._package.write_part(comments_part, root)
        logger.debug("Found %d comments in %s", len(comments), comments_part)
        return comments

    def _ensure_open(self) -> None:
        if self.closed:
            raise TemplateStateError("Template has already been saved or closed")

    def register_function(self, name: str, handler: Callable[..., Any]) -> None:
        """
        Make a function callable from directives, e.g. ``upper(name)``.

        Params:
            name: Function name used in directives
            handler: Callable receiving the resolved arguments positionally
        """
        self._resolver.register_function(name, handler)

    def render(self, data: Any) -> None:
        """
        Render the main document against data.

        Rendering again before saving is allowed but has no effect since the
        first render removes every comment range.

        Params:
            data: Mapping, sequence or object the directives are looked up in

        Raises:
            TemplateStateError: If the template was saved or closed
            MalformedDocumentError: If comment ranges are structurally invalid
            UndefinedFunctionError: If a directive calls an unknown function
            DirectiveEvaluationError: If a registered function fails
        """
        self._ensure_open()
        scope = ScopeChain(data, falsy_as_missing=self.options.falsy_as_missing)
        document = self._package.read_part(self._document_part)
        self._renderer.render(scope, document)
        self._package.write_part(self._document_part, document)

    def save(self, target: str | os.PathLike | IO[bytes] | None = None) -> None:
        """
        Write the rendered package and release the template.

        Params:
            target: Where to write; defaults to overwriting the template source

        Raises:
            TemplateStateError: If the template was already saved or closed
            PackageError: If the package cannot be written
        """
        self._ensure_open()
        try:
            self._package.save(self.source if target is None else target)
        finally:
            self.close()

    def close(self) -> None:
        """Release the package without saving; safe to call more than once."""
        self._finalizer()

    def __enter__(self) -> "Template":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_template(
    source: str | os.PathLike | IO[bytes],
    functions: Mapping[str, Callable[..., Any]] | None = None,
    options: RenderOptions | None = None,
) -> Template:
    """
    Convenience function to open a template.

    Params:
        source: Path or binary file object of the template
        functions: Functions callable from directives, by name
        options: Rendering options

    Returns:
        The opened Template
    """
    return Template(source, functions, options)
