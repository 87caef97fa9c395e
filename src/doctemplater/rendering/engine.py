"""
Document tree rendering.

The TreeRenderer walks an lxml subtree of a WordprocessingML part, pairs
comment range markers by id and applies each comment's resolved directive:
scalars overwrite the first text run inside the range, sequences repeat the
smallest subtree enclosing the range once per child scope.
"""

import copy
import logging

from lxml import etree

from doctemplater.exceptions import ErrorContext, MalformedDocumentError
from doctemplater.execution.resolution import CommentsResolver, SequenceValue
from doctemplater.execution.scopes import ScopeChain
from doctemplater.rendering.ooxml import (
    COMMENT_RANGE_END,
    COMMENT_RANGE_START,
    COMMENT_REFERENCE,
    ID,
    TEXT,
    remove_preserving_tail,
    set_text,
    text_of,
)

logger = logging.getLogger(__name__)


class TreeRenderer:
    """Applies resolved comment directives to a document tree in place."""

    def __init__(self, resolver: CommentsResolver):
        """
        Initialize the renderer.

        Params:
            resolver: Resolver holding the parsed directive of every comment
        """
        self.resolver = resolver

    def render(self, scope: ScopeChain, subtree: etree._Element) -> None:
        """
        Render every comment range found in subtree.

        The subtree is mutated: comment markers and references are removed,
        scalar ranges get their text replaced and repeated ranges are expanded.
        A subtree without comment markers is left untouched.

        Params:
            scope: Scope to evaluate this level's directives against
            subtree: Element whose descendants are rendered

        Raises:
            MalformedDocumentError: If range markers are unmatched, out of
                order, or cannot be expanded
        """
        starts, ends = self._collect_markers(subtree)

        for reference in list(subtree.iter(COMMENT_REFERENCE)):
            remove_preserving_tail(reference)

        pending = list(starts)
        while pending:
            comment_id = pending.pop(0)
            start = starts.pop(comment_id)
            end = ends.pop(comment_id)

            resolved = self.resolver.resolve(comment_id, scope)
            if isinstance(resolved, SequenceValue):
                nested = self._expand(comment_id, start, end, resolved)
                for nested_id in nested:
                    starts.pop(nested_id, None)
                    ends.pop(nested_id, None)
                pending = [i for i in pending if i not in nested]
            else:
                self._replace_text(start, end, text_of(resolved.data))
                remove_preserving_tail(start)
                remove_preserving_tail(end)

    def _collect_markers(
        self, subtree: etree._Element
    ) -> tuple[dict[str, etree._Element], dict[str, etree._Element]]:
        """
        Index range start and end markers by comment id, in document order.

        Raises:
            MalformedDocumentError: If a marker has no partner or an end
                marker precedes its start marker
        """
        starts: dict[str, etree._Element] = {}
        ends: dict[str, etree._Element] = {}

        for marker in subtree.iter(COMMENT_RANGE_START, COMMENT_RANGE_END):
            comment_id = marker.get(ID)
            if marker.tag == COMMENT_RANGE_START:
                starts[comment_id] = marker
            else:
                if comment_id not in starts:
                    raise MalformedDocumentError(
                        "Comment range ends before it starts",
                        ErrorContext(comment_id=comment_id),
                    )
                ends[comment_id] = marker

        for comment_id in starts:
            if comment_id not in ends:
                raise MalformedDocumentError(
                    "Comment range has no end marker",
                    ErrorContext(comment_id=comment_id),
                )

        return starts, ends

    def _replace_text(
        self, start: etree._Element, end: etree._Element, text: str
    ) -> None:
        """Overwrite the first text run between start and end."""
        node = start
        while node is not None and node is not end:
            if node.tag == TEXT:
                set_text(node, text, self.resolver.options.preserve_space)
                return
            node = self._next_in_document(node)

    def _next_in_document(self, node: etree._Element) -> etree._Element | None:
        """Next element in document order: first child, next sibling, or an ancestor's next sibling."""
        if len(node):
            return node[0]
        while node is not None:
            following = node.getnext()
            if following is not None:
                return following
            node = node.getparent()
        return None

    def _common_ancestor(
        self, start: etree._Element, end: etree._Element
    ) -> etree._Element | None:
        """Deepest element that is an ancestor of both start and end."""
        start_chain = list(reversed(list(start.iterancestors())))
        end_chain = list(reversed(list(end.iterancestors())))

        ancestor = None
        for start_node, end_node in zip(start_chain, end_chain):
            if start_node is not end_node:
                break
            ancestor = start_node
        return ancestor

    def _expand(
        self,
        comment_id: str,
        start: etree._Element,
        end: etree._Element,
        resolved: SequenceValue,
    ) -> set[str]:
        """
        Repeat the subtree enclosing a comment range once per child scope.

        Comment ranges nested in the repeated subtree are rendered inside each
        copy against that copy's scope.

        Returns:
            Ids of the nested comment ranges consumed by the expansion

        Raises:
            MalformedDocumentError: If the range has no common ancestor with a
                parent, or a nested range leaves the repeated subtree
        """
        template = self._common_ancestor(start, end)
        if template is None or template.getparent() is None:
            raise MalformedDocumentError(
                "Repeated comment range has no enclosing element to repeat",
                ErrorContext(comment_id=comment_id),
            )

        remove_preserving_tail(start)
        remove_preserving_tail(end)

        nested = {marker.get(ID) for marker in template.iter(COMMENT_RANGE_START)}
        inner_ends = {marker.get(ID) for marker in template.iter(COMMENT_RANGE_END)}
        if nested != inner_ends:
            crossing = sorted(nested ^ inner_ends)[0]
            raise MalformedDocumentError(
                "Comment range crosses the boundary of a repeated range",
                ErrorContext(comment_id=crossing),
            )

        logger.debug(
            "Expanding comment %s into %d repetitions", comment_id, len(resolved.scopes)
        )

        for child_scope in resolved.scopes:
            clone = copy.deepcopy(template)
            self.render(child_scope, clone)
            template.addprevious(clone)

        template.getparent().remove(template)
        return nested
