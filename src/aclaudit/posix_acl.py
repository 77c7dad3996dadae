"""POSIX access-control backend: owner, group, mode bits and access ACLs.

Permissions are expressed with the same rights flags the Windows backend
uses so that one decoder and one report format serve both hosts.
"""

from __future__ import annotations

import errno
import grp
import logging
import os
import pwd
import stat
import struct

from aclaudit.models import ALLOW, RawAce, SecurityDescriptor
from aclaudit.rights import (
    APPEND_DATA,
    DELETE_CHILD,
    EXECUTE,
    READ_ATTRIBUTES,
    READ_CONTROL,
    READ_DATA,
    READ_EA,
    WRITE_ATTRIBUTES,
    WRITE_DAC,
    WRITE_DATA,
    WRITE_EA,
)

log = logging.getLogger(__name__)

# r, w, x on a directory
PERM_READ = READ_DATA | READ_EA | READ_ATTRIBUTES
PERM_WRITE = WRITE_DATA | APPEND_DATA | DELETE_CHILD | WRITE_EA | WRITE_ATTRIBUTES
PERM_EXECUTE = EXECUTE
OWNER_EXTRA = READ_CONTROL | WRITE_DAC  # the owning user may always chmod

# --- system.posix_acl_access xattr layout (linux/posix_acl_xattr.h) ---
ACL_XATTR = "system.posix_acl_access"
ACL_XATTR_VERSION = 2
_HEADER = struct.Struct("<I")
_ENTRY = struct.Struct("<HHI")  # tag, perm, id

ACL_USER_OBJ = 0x01
ACL_USER = 0x02
ACL_GROUP_OBJ = 0x04
ACL_GROUP = 0x08
ACL_MASK = 0x10
ACL_OTHER = 0x20

_NO_ACL_ERRNOS = {errno.ENODATA, errno.ENOTSUP, errno.EOPNOTSUPP}


def perm_to_mask(perm: int) -> int:
    """Convert an rwx triplet (0-7) into a rights mask."""
    mask = 0
    if perm & 4:
        mask |= PERM_READ
    if perm & 2:
        mask |= PERM_WRITE
    if perm & 1:
        mask |= PERM_EXECUTE
    return mask


def user_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def parse_acl_xattr(blob: bytes) -> list[tuple[int, int, int]]:
    """Split a system.posix_acl_access value into (tag, perm, id) entries.

    Raises ValueError on an unknown version or a truncated blob.
    """
    if len(blob) < _HEADER.size:
        raise ValueError("ACL xattr too short")
    (version,) = _HEADER.unpack_from(blob, 0)
    if version != ACL_XATTR_VERSION:
        raise ValueError(f"Unsupported ACL xattr version: {version}")
    body = len(blob) - _HEADER.size
    if body % _ENTRY.size:
        raise ValueError("Truncated ACL xattr entry")
    return [
        _ENTRY.unpack_from(blob, off)
        for off in range(_HEADER.size, len(blob), _ENTRY.size)
    ]


def aces_from_mode(mode: int, owner: str, group: str) -> tuple[RawAce, ...]:
    """Build the three classic grants (owner, group, other) from mode bits."""
    return (
        RawAce(f"user:{owner}", ALLOW, perm_to_mask((mode >> 6) & 7) | OWNER_EXTRA),
        RawAce(f"group:{group}", ALLOW, perm_to_mask((mode >> 3) & 7)),
        RawAce("other", ALLOW, perm_to_mask(mode & 7)),
    )


def aces_from_acl(
    entries: list[tuple[int, int, int]],
    owner: str,
    group: str,
) -> tuple[RawAce, ...]:
    """Build grants from access ACL entries, applying the mask entry.

    The mask limits named users, the owning group and named groups, the same
    way getfacl reports "#effective" rights.
    """
    acl_mask = 7
    for tag, perm, _ in entries:
        if tag == ACL_MASK:
            acl_mask = perm & 7

    aces: list[RawAce] = []
    for tag, perm, ident in entries:
        perm &= 7
        if tag == ACL_USER_OBJ:
            aces.append(RawAce(f"user:{owner}", ALLOW, perm_to_mask(perm) | OWNER_EXTRA))
        elif tag == ACL_USER:
            aces.append(RawAce(f"user:{user_name(ident)}", ALLOW, perm_to_mask(perm & acl_mask)))
        elif tag == ACL_GROUP_OBJ:
            aces.append(RawAce(f"group:{group}", ALLOW, perm_to_mask(perm & acl_mask)))
        elif tag == ACL_GROUP:
            aces.append(RawAce(f"group:{group_name(ident)}", ALLOW, perm_to_mask(perm & acl_mask)))
        elif tag == ACL_OTHER:
            aces.append(RawAce("other", ALLOW, perm_to_mask(perm)))
    return tuple(aces)


def _read_acl_xattr(path: str) -> bytes | None:
    getxattr = getattr(os, "getxattr", None)
    if getxattr is None:
        return None
    try:
        return getxattr(path, ACL_XATTR)
    except OSError as e:
        if e.errno in _NO_ACL_ERRNOS:
            return None
        raise


def read_descriptor(path: str) -> SecurityDescriptor:
    """Query owner, group and grants for a folder.

    Raises PermissionError or FileNotFoundError like os.stat.
    """
    st = os.stat(path)
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
    owner = user_name(st.st_uid)
    group = group_name(st.st_gid)

    blob = _read_acl_xattr(path)
    if blob:
        try:
            aces = aces_from_acl(parse_acl_xattr(blob), owner, group)
        except ValueError as e:
            log.debug("unreadable ACL on %s (%s); using mode bits", path, e)
            aces = aces_from_mode(st.st_mode, owner, group)
    else:
        aces = aces_from_mode(st.st_mode, owner, group)

    return SecurityDescriptor(owner=owner, group=group, aces=aces)
