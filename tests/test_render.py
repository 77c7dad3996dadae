"""Tests for NestedTable and FlatTable rendering."""

from __future__ import annotations

import pytest

from aclaudit.errors import OutputExistsError, RenderIOError
from aclaudit.models import ALLOW, FolderRecord, Grant, ReportDocument
from aclaudit.render import RENDERERS, render, render_flat, render_nested, write_report


def test_flat_one_row_per_grant(sample_document):
    html = render_flat(sample_document)
    rows = [line for line in html.splitlines() if line.startswith('<tr class="grant">')]
    assert len(rows) == 3
    assert all("<td>/data</td><td>U0</td><td>G0</td>" in row for row in rows[:2])
    assert "<td>/data/a</td><td>U1</td><td>G1</td>" in rows[2]
    assert "<td>P1</td>" in rows[2]


def test_flat_follows_document_order(sample_document):
    html = render_flat(sample_document)
    assert html.index("Administrators") < html.index("Guests") < html.index("<td>P1</td>")


def test_flat_skips_folders_without_grants():
    doc = ReportDocument(root="/r", max_depth=1, folders=(FolderRecord("/r", "o", "g"),))
    assert '<tr class="grant">' not in render_flat(doc)


def test_nested_one_folder_row_each(sample_document):
    html = render_nested(sample_document)
    assert html.count('<tr class="folder">') == 2
    assert html.count('<tr class="grant">') == 3
    assert html.count('<table class="grants">') == 2
    assert html.index("<td>/data</td>") < html.index("Guests") < html.index("<td>/data/a</td>")


def test_nested_rights_joined(sample_document):
    html = render_nested(sample_document)
    assert "WriteData/AddFile<br>Delete" in html
    assert '<td class="deny">Deny</td>' in html


def test_markup_is_escaped():
    doc = ReportDocument(
        root="/r",
        max_depth=1,
        folders=(FolderRecord("/r/<b>", "o&o", "g", (Grant("<script>", ALLOW, ("x",)),)),),
    )
    for renderer in RENDERERS.values():
        html = renderer(doc)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "/r/&lt;b&gt;" in html
        assert "o&amp;o" in html


def test_render_dispatch(sample_document):
    assert render(sample_document, "NestedTable") == render_nested(sample_document)
    assert render(sample_document, "FlatTable") == render_flat(sample_document)
    with pytest.raises(ValueError):
        render(sample_document, "Pie")


def test_write_report(tmp_path):
    target = tmp_path / "report.html"
    write_report(str(target), "<html></html>")
    assert target.read_text(encoding="utf-8") == "<html></html>"


def test_write_report_never_overwrites(tmp_path):
    target = tmp_path / "report.html"
    target.write_text("keep")
    with pytest.raises(OutputExistsError):
        write_report(str(target), "new")
    assert target.read_text() == "keep"


def test_write_report_unwritable(tmp_path):
    with pytest.raises(RenderIOError):
        write_report(str(tmp_path / "missing" / "report.html"), "x")


def test_undecodable_bytes_are_shown_escaped():
    doc = ReportDocument(
        root="/r",
        max_depth=1,
        folders=(FolderRecord("/r/bad\udcffname", "o", "g", (Grant("p", ALLOW, ("x",)),)),),
    )
    for renderer in RENDERERS.values():
        html = renderer(doc)
        assert "/r/bad\\udcffname" in html
        html.encode("utf-8")


def test_failed_write_leaves_no_file(tmp_path):
    target = tmp_path / "report.html"
    with pytest.raises(RenderIOError):
        write_report(str(target), "<td>bad\udcffname</td>")
    assert not target.exists()
