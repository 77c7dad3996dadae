"""Data models: raw host descriptors and decoded folder records."""

from __future__ import annotations

from dataclasses import dataclass

ALLOW = "Allow"
DENY = "Deny"
EFFECTS = (ALLOW, DENY)


@dataclass(frozen=True)
class RawAce:
    """One access-control entry as the host reports it, mask undecoded."""

    principal: str
    effect: str  # "Allow" | "Deny"
    mask: int | str


@dataclass(frozen=True)
class SecurityDescriptor:
    owner: str
    group: str
    aces: tuple[RawAce, ...] = ()


@dataclass(frozen=True)
class Grant:
    principal: str
    effect: str  # "Allow" | "Deny"
    rights: tuple[str, ...] = ()


@dataclass(frozen=True)
class FolderRecord:
    path: str
    owner: str
    group: str
    grants: tuple[Grant, ...] = ()


@dataclass(frozen=True)
class ReportDocument:
    """The full scan: folder records in walk order."""

    root: str
    max_depth: int
    folders: tuple[FolderRecord, ...] = ()
