"""Folder walker: depth-bounded directory enumeration with skip-and-continue."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from aclaudit.errors import E_WALK_SKIP, WalkRootError, err

log = logging.getLogger(__name__)


@dataclass
class WalkResult:
    folders: list[str] = field(default_factory=list)
    skipped: list[dict[str, Any]] = field(default_factory=list)


def walk_folders(root: str, max_depth: int) -> WalkResult:
    """Return folders under root, root first, no deeper than max_depth.

    Pre-order, children in filesystem enumeration order. A max_depth of 0
    returns the root alone without listing it. Directory symlinks and
    junctions are neither reported nor descended into.

    A subtree that cannot be listed is recorded in ``skipped`` and the walk
    continues with its siblings. Raises WalkRootError if the root itself is
    missing, not a directory, or cannot be listed.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    root_abs = os.path.abspath(root)
    if not os.path.isdir(root_abs):
        raise WalkRootError(f"Root does not exist or is not a directory: {root_abs}")

    result = WalkResult()
    # Children are pushed in reverse so pops come out in enumeration order.
    stack: list[tuple[str, int]] = [(root_abs, 0)]
    while stack:
        current, depth = stack.pop()
        result.folders.append(current)
        if depth >= max_depth:
            continue
        try:
            with os.scandir(current) as it:
                children = [
                    entry.path for entry in it
                    if entry.is_dir(follow_symlinks=False)
                ]
        except OSError as e:
            if depth == 0:
                raise WalkRootError(f"Cannot list root {root_abs}: {_reason(e)}") from e
            log.warning("continuing ... %s %s", current, _reason(e))
            result.skipped.append(
                err(E_WALK_SKIP, "Folder could not be listed.", {"path": current, "reason": _reason(e)})
            )
            continue
        stack.extend((child, depth + 1) for child in reversed(children))

    return result


def _reason(e: OSError) -> str:
    return e.strerror or e.__class__.__name__
