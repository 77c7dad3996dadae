"""Error taxonomy: per-folder result envelopes and fatal run errors."""

from __future__ import annotations

from typing import Any

# Per-folder skip codes. Handled locally; never abort a run.
E_WALK_SKIP = "E_WALK_SKIP"
E_ACCESS_DENIED = "E_ACCESS_DENIED"
E_NOT_FOUND = "E_NOT_FOUND"


def err(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured error envelope."""
    return {
        "ok": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    }


def ok(result: dict[str, Any]) -> dict[str, Any]:
    """Build a structured success envelope."""
    return {"ok": True, "result": result}


class AclAuditError(RuntimeError):
    """Base class for errors that end a run."""


class OutputExistsError(AclAuditError):
    """The report destination is already present."""


class WalkRootError(AclAuditError):
    """The scan root cannot be walked at all."""


class FetchUnknownError(AclAuditError):
    """A folder's descriptor query failed for an unclassified reason."""


class RenderIOError(AclAuditError):
    """The report or document destination is not writable."""


class DocumentError(AclAuditError):
    """A persisted report document cannot be read back."""
