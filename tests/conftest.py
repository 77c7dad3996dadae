"""Shared test fixtures for AclAudit tests."""

from __future__ import annotations

import os
from typing import Callable

import pytest

from aclaudit import fetcher
from aclaudit.models import ALLOW, DENY, FolderRecord, Grant, RawAce, ReportDocument, SecurityDescriptor


@pytest.fixture
def make_tree(tmp_path) -> Callable[..., str]:
    """Create folders from relative paths under tmp_path; return the root."""

    def _make(*rel_paths: str) -> str:
        for rel in rel_paths:
            os.makedirs(os.path.join(tmp_path, *rel.split("/")), exist_ok=True)
        return str(tmp_path)

    return _make


@pytest.fixture
def fake_host(monkeypatch) -> dict[str, object]:
    """Replace the host ACL query with a lookup table.

    Map a folder basename to a SecurityDescriptor, or to an exception
    instance to raise. Unlisted folders get a default descriptor.
    """
    table: dict[str, object] = {}

    def read_descriptor(path: str) -> SecurityDescriptor:
        answer = table.get(os.path.basename(path))
        if isinstance(answer, BaseException):
            raise answer
        if answer is None:
            return SecurityDescriptor(owner="U0", group="G0", aces=(RawAce("P0", ALLOW, 0x1),))
        return answer

    monkeypatch.setattr(fetcher, "read_descriptor", read_descriptor)
    return table


@pytest.fixture
def sample_document() -> ReportDocument:
    return ReportDocument(
        root="/data",
        max_depth=3,
        folders=(
            FolderRecord(
                path="/data",
                owner="U0",
                group="G0",
                grants=(
                    Grant("BUILTIN\\Administrators", ALLOW, ("GenericAll",)),
                    Grant("Guests", DENY, ("WriteData/AddFile", "Delete")),
                ),
            ),
            FolderRecord(
                path="/data/a",
                owner="U1",
                group="G1",
                grants=(Grant("P1", ALLOW, ("ReadData/ListDirectory",)),),
            ),
        ),
    )
