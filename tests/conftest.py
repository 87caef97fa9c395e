"""
Shared test fixtures and utilities for the doctemplater test suite.
"""

import zipfile

import pytest
from lxml import etree

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
<Default Extension="xml" ContentType="application/xml"/>
<Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
<Override PartName="/word/comments.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.comments+xml"/>
</Types>"""

PACKAGE_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

DOCUMENT_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>
{comments_relationship}
</Relationships>"""

COMMENTS_RELATIONSHIP = (
    '<Relationship Id="rId2" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/comments" '
    'Target="comments.xml"/>'
)


def document_xml(body: str) -> str:
    """Wrap body markup into a complete w:document."""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}"><w:body>{body}</w:body></w:document>'
    )


def comments_xml(comments: dict[str, str]) -> str:
    """Build a w:comments part with one paragraph per comment."""
    items = "".join(
        f'<w:comment w:id="{comment_id}" w:author="Reviewer">'
        f"<w:p><w:r><w:t>{text}</w:t></w:r></w:p></w:comment>"
        for comment_id, text in comments.items()
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:comments xmlns:w="{W_NS}">{items}</w:comments>'
    )


def texts(root: etree._Element) -> list[str]:
    """Text of every w:t element in document order."""
    return [t.text or "" for t in root.iter(f"{{{W_NS}}}t")]


def count(root: etree._Element, tag: str) -> int:
    return sum(1 for _ in root.iter(f"{{{W_NS}}}{tag}"))


@pytest.fixture
def build_document():
    """Parse body markup into a w:document root element.

    Usage:
        def test_something(build_document):
            root = build_document("<w:p>...</w:p>")
    """

    def _build(body: str) -> etree._Element:
        return etree.fromstring(document_xml(body).encode("utf-8"))

    return _build


@pytest.fixture
def make_template(tmp_path):
    """Write a minimal .docx package and return its path.

    Usage:
        def test_something(make_template):
            path = make_template(body, {"1": "customer.name"})
    """

    def _make(
        body: str,
        comments: dict[str, str],
        with_comments_relationship: bool = True,
        name: str = "template.docx",
    ):
        path = tmp_path / name
        relationship = COMMENTS_RELATIONSHIP if with_comments_relationship else ""
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as package:
            package.writestr("[Content_Types].xml", CONTENT_TYPES)
            package.writestr("_rels/.rels", PACKAGE_RELS)
            package.writestr("word/document.xml", document_xml(body))
            package.writestr(
                "word/_rels/document.xml.rels",
                DOCUMENT_RELS.format(comments_relationship=relationship),
            )
            package.writestr("word/comments.xml", comments_xml(comments))
            package.writestr("word/styles.xml", f'<w:styles xmlns:w="{W_NS}"/>')
        return path

    return _make


def read_part(path, part_name: str) -> etree._Element:
    with zipfile.ZipFile(path) as package:
        return etree.fromstring(package.read(part_name))


@pytest.fixture
def texts_of():
    """Function listing the text of every w:t under an element."""
    return texts


@pytest.fixture
def count_of():
    """Function counting w:* elements of a local name under an element."""
    return count


@pytest.fixture
def read_package_part():
    """Function parsing one XML part out of a saved package."""
    return read_part
