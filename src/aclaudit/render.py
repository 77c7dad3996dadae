"""Report renderer: NestedTable and FlatTable HTML reports."""

from __future__ import annotations

import logging
import os
from html import escape as _html_escape
from typing import Callable

from aclaudit.config import RENDER_FLAT, RENDER_NESTED
from aclaudit.errors import OutputExistsError, RenderIOError
from aclaudit.models import DENY, FolderRecord, Grant, ReportDocument

log = logging.getLogger(__name__)

_STYLE = """\
body { font-family: 'Segoe UI', sans-serif; margin: 20px; }
table { border-collapse: collapse; width: 100%; font-size: 14px; }
th, td { border: 1px solid #ddd; padding: 6px; text-align: left; vertical-align: top; }
th { background-color: #3498db; color: white; }
table.grants th { background-color: #7f8c8d; }
td.deny { color: #c0392b; font-weight: bold; }"""


def escape(text: str) -> str:
    """HTML-escape text, showing undecodable bytes (lone surrogates) as \\udcXX."""
    return _html_escape(text.encode("utf-8", "backslashreplace").decode("utf-8"))


def _page(doc: ReportDocument, mode: str, body: str) -> str:
    title = f"Folder permissions: {escape(doc.root)}"
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{title}</title>\n<style>\n{_STYLE}\n</style>\n</head>\n<body>\n"
        f"<h1>{title}</h1>\n"
        f"<p>{len(doc.folders)} folder(s), mode {escape(mode)}</p>\n"
        f"{body}"
        "</body>\n</html>\n"
    )


def _grant_cells(grant: Grant) -> str:
    effect_class = ' class="deny"' if grant.effect == DENY else ""
    rights = "<br>".join(escape(r) for r in grant.rights)
    return (
        f"<td>{escape(grant.principal)}</td>"
        f"<td{effect_class}>{escape(grant.effect)}</td>"
        f"<td>{rights}</td>"
    )


def _folder_cells(record: FolderRecord) -> str:
    return (
        f"<td>{escape(record.path)}</td>"
        f"<td>{escape(record.owner)}</td>"
        f"<td>{escape(record.group)}</td>"
    )


def render_nested(doc: ReportDocument) -> str:
    """One row per folder, each holding an inner table of its grants."""
    lines = [
        "<table class=\"folders\">",
        "<tr><th>Path</th><th>Owner</th><th>Group</th><th>Access</th></tr>",
    ]
    for record in doc.folders:
        lines.append(f"<tr class=\"folder\">{_folder_cells(record)}<td>")
        lines.append("<table class=\"grants\">")
        lines.append("<tr><th>Principal</th><th>Effect</th><th>Rights</th></tr>")
        for grant in record.grants:
            lines.append(f"<tr class=\"grant\">{_grant_cells(grant)}</tr>")
        lines.append("</table>")
        lines.append("</td></tr>")
    lines.append("</table>")
    return _page(doc, RENDER_NESTED, "\n".join(lines) + "\n")


def render_flat(doc: ReportDocument) -> str:
    """One row per (folder, grant) pair, folder columns repeated."""
    lines = [
        "<table class=\"flat\">",
        "<tr><th>Path</th><th>Owner</th><th>Group</th>"
        "<th>Principal</th><th>Effect</th><th>Rights</th></tr>",
    ]
    for record in doc.folders:
        folder = _folder_cells(record)
        for grant in record.grants:
            lines.append(f"<tr class=\"grant\">{folder}{_grant_cells(grant)}</tr>")
    lines.append("</table>")
    return _page(doc, RENDER_FLAT, "\n".join(lines) + "\n")


RENDERERS: dict[str, Callable[[ReportDocument], str]] = {
    RENDER_NESTED: render_nested,
    RENDER_FLAT: render_flat,
}


def render(doc: ReportDocument, mode: str) -> str:
    """Render doc in the given mode. Raises ValueError on an unknown mode."""
    renderer = RENDERERS.get(mode)
    if renderer is None:
        raise ValueError(f"Unknown render mode {mode!r}; expected one of {', '.join(RENDERERS)}")
    return renderer(doc)


def write_report(path: str, text: str) -> None:
    """Write the report, refusing to replace an existing file.

    A report that fails part way is removed, so no partial output is left.
    """
    try:
        f = open(path, "x", encoding="utf-8")
    except FileExistsError as e:
        raise OutputExistsError(f"Report already exists: {path}") from e
    except OSError as e:
        raise RenderIOError(f"Cannot write report {path}: {e}") from e

    try:
        with f:
            f.write(text)
    except BaseException as e:
        try:
            os.remove(path)
        except OSError:
            log.warning("could not remove partial report %s", path)
        if isinstance(e, (OSError, UnicodeError)):
            raise RenderIOError(f"Cannot write report {path}: {e}") from e
        raise
    log.info("report written to %s", path)
