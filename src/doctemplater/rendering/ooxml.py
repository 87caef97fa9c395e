"""
WordprocessingML names and small element helpers.
"""

from typing import Any

from lxml import etree

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
XML_NS = "http://www.w3.org/XML/1998/namespace"

TYPE_DOCUMENT = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
)
TYPE_COMMENTS = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/comments"
)


def w(tag: str) -> str:
    """Clark-notation name in the WordprocessingML namespace."""
    return f"{{{W_NS}}}{tag}"


def rel(tag: str) -> str:
    return f"{{{REL_NS}}}{tag}"


COMMENT = w("comment")
COMMENT_RANGE_START = w("commentRangeStart")
COMMENT_RANGE_END = w("commentRangeEnd")
COMMENT_REFERENCE = w("commentReference")
TEXT = w("t")
ID = w("id")
SPACE = f"{{{XML_NS}}}space"


def text_of(value: Any) -> str:
    """Textual form of a resolved value as written into a text run."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def set_text(element: etree._Element, text: str, preserve_space: bool = True) -> None:
    """Replace all content of a w:t element with a single text node."""
    for child in list(element):
        element.remove(child)
    element.text = text
    if preserve_space and text != text.strip():
        element.set(SPACE, "preserve")


def remove_preserving_tail(element: etree._Element) -> None:
    """Detach an element from its parent without losing its tail text."""
    parent = element.getparent()
    if parent is None:
        return
    if element.tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + element.tail
        else:
            parent.text = (parent.text or "") + element.tail
    parent.remove(element)
