"""Permission fetcher: per-folder descriptor query with classified failures."""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable

from aclaudit.errors import E_ACCESS_DENIED, E_NOT_FOUND, FetchUnknownError, err, ok
from aclaudit.models import FolderRecord, Grant, SecurityDescriptor
from aclaudit.rights import decode_rights

if os.name == "nt":
    from aclaudit.win_acl import read_descriptor
else:
    from aclaudit.posix_acl import read_descriptor

log = logging.getLogger(__name__)


def to_record(path: str, sd: SecurityDescriptor) -> FolderRecord:
    """Decode a host descriptor into a FolderRecord."""
    grants = tuple(
        Grant(principal=ace.principal, effect=ace.effect, rights=tuple(decode_rights(ace.mask)))
        for ace in sd.aces
    )
    return FolderRecord(path=path, owner=sd.owner, group=sd.group, grants=grants)


def fetch_folder(path: str) -> dict[str, Any]:
    """Query one folder's owner, group and grants.

    Returns ok({"record": FolderRecord}) or an E_ACCESS_DENIED / E_NOT_FOUND
    envelope. Any other failure raises FetchUnknownError.
    """
    try:
        sd = read_descriptor(path)
    except PermissionError as e:
        return _skip(E_ACCESS_DENIED, "Access denied reading permissions.", path, e)
    except (FileNotFoundError, NotADirectoryError) as e:
        return _skip(E_NOT_FOUND, "Folder no longer exists.", path, e)
    except Exception as e:
        raise FetchUnknownError(f"Failed to read permissions of {path}: {e}") from e

    log.info("exporting ... %s", path)
    return ok({"record": to_record(path, sd)})


def collect_records(paths: Iterable[str]) -> tuple[list[FolderRecord], list[dict[str, Any]]]:
    """Fetch every path in order; return (records, skipped envelopes)."""
    records: list[FolderRecord] = []
    skipped: list[dict[str, Any]] = []
    for path in paths:
        result = fetch_folder(path)
        if result["ok"]:
            records.append(result["result"]["record"])
        else:
            skipped.append(result)
    return records, skipped


def _skip(code: str, message: str, path: str, e: OSError) -> dict[str, Any]:
    reason = e.strerror or e.__class__.__name__
    log.warning("continuing ... %s %s", path, reason)
    return err(code, message, {"path": path, "reason": reason})
