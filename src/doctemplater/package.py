"""
Access to the parts of an OOXML package.

DocxPackage reads XML parts out of the zip container, keeps rewritten parts in
memory and writes a complete package on save.
"""

import io
import logging
import os
import posixpath
import zipfile
from typing import IO

from lxml import etree

from doctemplater.exceptions import PackageError
from doctemplater.rendering.ooxml import rel

logger = logging.getLogger(__name__)

PACKAGE_RELS = "_rels/.rels"


def rels_part_for(part_name: str) -> str:
    """
    Name of the relationships part belonging to a part.

    Examples:
        "word/document.xml" -> "word/_rels/document.xml.rels"
        "" (the package itself) -> "_rels/.rels"
    """
    if not part_name:
        return PACKAGE_RELS
    directory, name = posixpath.split(part_name)
    return posixpath.join(directory, "_rels", f"{name}.rels")


def _source_directory(rels_part: str) -> str:
    return posixpath.dirname(posixpath.dirname(rels_part))


class DocxPackage:
    """An opened word-processing package."""

    def __init__(self, source: str | os.PathLike | IO[bytes]):
        """
        Open the package.

        Params:
            source: Path or binary file object of the .docx file

        Raises:
            PackageError: If the source is not a readable zip archive
        """
        self.source = source
        self._written: dict[str, etree._Element] = {}
        try:
            self._zip: zipfile.ZipFile | None = zipfile.ZipFile(source)
        except (OSError, zipfile.BadZipFile) as e:
            raise PackageError(f"Invalid document: {e}") from e

    @classmethod
    def open(cls, source: str | os.PathLike | IO[bytes]) -> "DocxPackage":
        return cls(source)

    @property
    def closed(self) -> bool:
        return self._zip is None

    def _archive(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise PackageError("Package is closed")
        return self._zip

    def has_part(self, part_name: str) -> bool:
        return part_name in self._written or part_name in self._archive().namelist()

    def read_part(self, part_name: str) -> etree._Element:
        """
        Parse an XML part.

        Parts written earlier through write_part are returned as written.

        Params:
            part_name: Member name inside the package, e.g. "word/document.xml"

        Returns:
            Root element of the part

        Raises:
            PackageError: If the part does not exist or is not well-formed XML
        """
        if part_name in self._written:
            return self._written[part_name]

        try:
            content = self._archive().read(part_name)
        except KeyError as e:
            raise PackageError(f"{part_name} is not a valid file path") from e

        parser = etree.XMLParser(resolve_entities=False, remove_blank_text=False)
        try:
            return etree.fromstring(content, parser)
        except etree.XMLSyntaxError as e:
            raise PackageError(f"{part_name} is not a valid xml file: {e}") from e

    def write_part(self, part_name: str, root: etree._Element) -> None:
        """Replace the content of a part; it is serialized on save."""
        self._written[part_name] = root
        logger.debug("Part %s marked for writing", part_name)

    def resolve_relationship_target(
        self, rels_part: str, relationship_type: str
    ) -> str | None:
        """
        Find the part targeted by the first relationship of a given type.

        Params:
            rels_part: Relationships part to search, e.g. "_rels/.rels"
            relationship_type: Relationship type URI

        Returns:
            Package-relative part name of the target, or None when the
            relationships part or a matching relationship does not exist
        """
        if not self.has_part(rels_part):
            return None

        relationships = self.read_part(rels_part)
        for relationship in relationships.iter(rel("Relationship")):
            if relationship.get("Type") != relationship_type:
                continue
            target = relationship.get("Target", "")
            if target.startswith("/"):
                return posixpath.normpath(target.lstrip("/"))
            return posixpath.normpath(
                posixpath.join(_source_directory(rels_part), target)
            )
        return None

    def to_bytes(self) -> bytes:
        """Serialize the package with all written parts replaced."""
        archive = self._archive()
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as output:
            for info in archive.infolist():
                if info.filename in self._written:
                    content = etree.tostring(
                        self._written[info.filename],
                        xml_declaration=True,
                        encoding="UTF-8",
                        standalone=True,
                    )
                else:
                    content = archive.read(info.filename)
                output.writestr(info, content)
        return buffer.getvalue()

    def save(self, target: str | os.PathLike | IO[bytes]) -> None:
        """
        Write the package to target and release the source archive.

        The source may itself be the target.

        Raises:
            PackageError: If the package is closed or target cannot be written
        """
        content = self.to_bytes()
        self.close()
        try:
            if hasattr(target, "write"):
                if target is self.source:
                    target.seek(0)
                    target.truncate()
                target.write(content)
            else:
                with open(target, "wb") as f:
                    f.write(content)
        except OSError as e:
            raise PackageError(f"Cannot write package: {e}") from e
        logger.debug("Saved package (%d bytes)", len(content))

    def close(self) -> None:
        """Release the source archive; safe to call more than once."""
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "DocxPackage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
