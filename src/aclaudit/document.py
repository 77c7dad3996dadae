"""Report serializer: ReportDocument building and XML persistence."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Iterable

from aclaudit.errors import DocumentError, RenderIOError
from aclaudit.models import EFFECTS, FolderRecord, Grant, ReportDocument

DOCUMENT_TAG = "aclReport"
DOCUMENT_VERSION = "1"

# Characters XML 1.0 cannot carry verbatim in an attribute: controls, tab and
# newlines (normalized by parsers), lone surrogates and U+FFFE/U+FFFF.
_XML_UNSAFE = re.compile("[^\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")
ESCAPED_ATTR = "escaped"
TEXT_KEY = "#text"


def _needs_escape(value: str) -> bool:
    return _XML_UNSAFE.search(value) is not None


def _encode(value: str) -> str:
    return value.encode("unicode_escape").decode("ascii")


def _decode(value: str) -> str:
    return value.encode("ascii").decode("unicode_escape")


def _set(elem: ET.Element, name: str, value: str) -> None:
    """Set an attribute, backslash-escaping values XML cannot hold.

    Escaped attribute names are listed in the element's "escaped" attribute.
    """
    if _needs_escape(value):
        value = _encode(value)
        _mark_escaped(elem, name)
    elem.set(name, value)


def _set_text(elem: ET.Element, value: str) -> None:
    if _needs_escape(value):
        value = _encode(value)
        _mark_escaped(elem, TEXT_KEY)
    elem.text = value


def _mark_escaped(elem: ET.Element, name: str) -> None:
    names = elem.get(ESCAPED_ATTR, "").split()
    elem.set(ESCAPED_ATTR, " ".join(names + [name]))


def _get(elem: ET.Element, name: str) -> str:
    value = elem.attrib[name]
    if name in elem.get(ESCAPED_ATTR, "").split():
        return _decode(value)
    return value


def _get_text(elem: ET.Element) -> str:
    value = elem.text or ""
    if TEXT_KEY in elem.get(ESCAPED_ATTR, "").split():
        return _decode(value)
    return value


def build_document(
    records: Iterable[FolderRecord],
    root: str,
    max_depth: int,
) -> ReportDocument:
    """Collect folder records into a ReportDocument, preserving order."""
    return ReportDocument(root=root, max_depth=max_depth, folders=tuple(records))


def to_xml(doc: ReportDocument) -> ET.Element:
    """Serialize a document to an <aclReport> element tree.

    <aclReport version root maxDepth>
      <folder path owner group>
        <grant principal effect><right>name</right>...</grant>
    """
    top = ET.Element(DOCUMENT_TAG, {"version": DOCUMENT_VERSION})
    _set(top, "root", doc.root)
    top.set("maxDepth", str(doc.max_depth))
    for record in doc.folders:
        folder = ET.SubElement(top, "folder")
        _set(folder, "path", record.path)
        _set(folder, "owner", record.owner)
        _set(folder, "group", record.group)
        for grant in record.grants:
            node = ET.SubElement(folder, "grant")
            _set(node, "principal", grant.principal)
            _set(node, "effect", grant.effect)
            for right in grant.rights:
                _set_text(ET.SubElement(node, "right"), right)
    return top


def from_xml(top: ET.Element) -> ReportDocument:
    """Rebuild a ReportDocument from an <aclReport> element."""
    if top.tag != DOCUMENT_TAG:
        raise DocumentError(f"Not a report document: root element is <{top.tag}>")
    try:
        folders = tuple(
            FolderRecord(
                path=_get(folder, "path"),
                owner=_get(folder, "owner"),
                group=_get(folder, "group"),
                grants=tuple(_grant(node) for node in folder.findall("grant")),
            )
            for folder in top.findall("folder")
        )
        return ReportDocument(
            root=_get(top, "root"),
            max_depth=int(top.attrib["maxDepth"]),
            folders=folders,
        )
    except KeyError as e:
        raise DocumentError(f"Report document is missing attribute {e}") from e
    except ValueError as e:
        raise DocumentError(f"Report document has a bad value: {e}") from e


def _grant(node: ET.Element) -> Grant:
    effect = _get(node, "effect")
    if effect not in EFFECTS:
        raise ValueError(f"unknown effect {effect!r}")
    return Grant(
        principal=_get(node, "principal"),
        effect=effect,
        rights=tuple(_get_text(right) for right in node.findall("right")),
    )


def save_document(doc: ReportDocument, path: str) -> None:
    """Write the document as UTF-8 XML. Raises RenderIOError if unwritable."""
    tree = ET.ElementTree(to_xml(doc))
    ET.indent(tree)
    try:
        tree.write(path, encoding="utf-8", xml_declaration=True)
    except OSError as e:
        raise RenderIOError(f"Cannot write report document {path}: {e}") from e


def load_document(path: str) -> ReportDocument:
    """Read a document written by save_document."""
    try:
        tree = ET.parse(path)
    except OSError as e:
        raise DocumentError(f"Cannot read report document {path}: {e}") from e
    except ET.ParseError as e:
        raise DocumentError(f"Malformed report document {path}: {e}") from e
    return from_xml(tree.getroot())
