"""Tests for the advapi32 backend."""

from __future__ import annotations

import os

import pytest

pytestmark = pytest.mark.skipif(os.name != "nt", reason="Windows-only")


def test_extended_path_forms():
    from aclaudit.win_acl import to_extended_path

    assert to_extended_path("C:\\data\\a") == "\\\\?\\C:\\data\\a"
    assert to_extended_path("\\\\server\\share\\a") == "\\\\?\\UNC\\server\\share\\a"
    assert to_extended_path("\\\\?\\C:\\x") == "\\\\?\\C:\\x"


def test_reads_own_temp_folder(tmp_path):
    from aclaudit.win_acl import read_descriptor, win_available

    if not win_available():
        pytest.skip("advapi32 not available")
    sd = read_descriptor(str(tmp_path))
    assert sd.owner
    assert sd.aces
    assert {ace.effect for ace in sd.aces} <= {"Allow", "Deny"}
    assert all(isinstance(ace.mask, int) for ace in sd.aces)


def test_missing_folder_is_file_not_found(tmp_path):
    from aclaudit.win_acl import read_descriptor

    with pytest.raises(FileNotFoundError):
        read_descriptor(str(tmp_path / "vanished"))


def test_well_known_sid_string(tmp_path):
    import ctypes

    from aclaudit.win_acl import sid_to_string

    # S-1-1-0 (Everyone): revision 1, one sub-authority, authority 1
    sid = (ctypes.c_ubyte * 12)(1, 1, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0)
    assert sid_to_string(ctypes.addressof(sid)) == "S-1-1-0"
