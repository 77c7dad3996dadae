"""Windows access-control backend via advapi32.

Uses GetNamedSecurityInfoW + GetAce + LookupAccountSidW through ctypes.
No pywin32 dependency.
"""

from __future__ import annotations

import ctypes
import ctypes.wintypes as wintypes
import logging
import os

from aclaudit.models import ALLOW, DENY, RawAce, SecurityDescriptor
from aclaudit.rights import GENERIC_ALL

log = logging.getLogger(__name__)

# --- Win32 constants ---
SE_FILE_OBJECT = 1
OWNER_SECURITY_INFORMATION = 0x00000001
GROUP_SECURITY_INFORMATION = 0x00000002
DACL_SECURITY_INFORMATION = 0x00000004
ACL_SIZE_INFORMATION_CLASS = 2

ACCESS_ALLOWED_ACE_TYPE = 0
ACCESS_DENIED_ACE_TYPE = 1
_ACE_EFFECTS = {ACCESS_ALLOWED_ACE_TYPE: ALLOW, ACCESS_DENIED_ACE_TYPE: DENY}

ERROR_SUCCESS = 0
ERROR_INSUFFICIENT_BUFFER = 122

EVERYONE = "Everyone"


# --- Win32 structures ---

class ACL_SIZE_INFORMATION(ctypes.Structure):
    _fields_ = [
        ("AceCount", wintypes.DWORD),
        ("AclBytesInUse", wintypes.DWORD),
        ("AclBytesFree", wintypes.DWORD),
    ]


class ACE_HEADER(ctypes.Structure):
    _fields_ = [
        ("AceType", wintypes.BYTE),
        ("AceFlags", wintypes.BYTE),
        ("AceSize", wintypes.WORD),
    ]


class ACCESS_ALLOWED_ACE(ctypes.Structure):
    # ACCESS_DENIED_ACE shares this layout; the SID starts at SidStart.
    _fields_ = [
        ("Header", ACE_HEADER),
        ("Mask", wintypes.DWORD),
        ("SidStart", wintypes.DWORD),
    ]


# --- advapi32 bindings (only on Windows) ---

_WIN_AVAILABLE = False

try:
    _advapi32 = ctypes.WinDLL("advapi32", use_last_error=True)
    _kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

    _GetNamedSecurityInfoW = _advapi32.GetNamedSecurityInfoW
    _GetNamedSecurityInfoW.argtypes = [
        wintypes.LPCWSTR,                  # pObjectName
        wintypes.DWORD,                    # ObjectType
        wintypes.DWORD,                    # SecurityInfo
        ctypes.POINTER(wintypes.LPVOID),   # ppsidOwner
        ctypes.POINTER(wintypes.LPVOID),   # ppsidGroup
        ctypes.POINTER(wintypes.LPVOID),   # ppDacl
        ctypes.POINTER(wintypes.LPVOID),   # ppSacl
        ctypes.POINTER(wintypes.LPVOID),   # ppSecurityDescriptor
    ]
    _GetNamedSecurityInfoW.restype = wintypes.DWORD  # returns the error code, not BOOL

    _GetAclInformation = _advapi32.GetAclInformation
    _GetAclInformation.argtypes = [wintypes.LPVOID, wintypes.LPVOID, wintypes.DWORD, wintypes.DWORD]
    _GetAclInformation.restype = wintypes.BOOL

    _GetAce = _advapi32.GetAce
    _GetAce.argtypes = [wintypes.LPVOID, wintypes.DWORD, ctypes.POINTER(wintypes.LPVOID)]
    _GetAce.restype = wintypes.BOOL

    _LookupAccountSidW = _advapi32.LookupAccountSidW
    _LookupAccountSidW.argtypes = [
        wintypes.LPCWSTR,                  # lpSystemName
        wintypes.LPVOID,                   # Sid
        wintypes.LPWSTR,                   # Name
        ctypes.POINTER(wintypes.DWORD),    # cchName
        wintypes.LPWSTR,                   # ReferencedDomainName
        ctypes.POINTER(wintypes.DWORD),    # cchReferencedDomainName
        ctypes.POINTER(wintypes.DWORD),    # peUse
    ]
    _LookupAccountSidW.restype = wintypes.BOOL

    _ConvertSidToStringSidW = _advapi32.ConvertSidToStringSidW
    _ConvertSidToStringSidW.argtypes = [wintypes.LPVOID, ctypes.POINTER(wintypes.LPWSTR)]
    _ConvertSidToStringSidW.restype = wintypes.BOOL

    _LocalFree = _kernel32.LocalFree
    _LocalFree.argtypes = [wintypes.HLOCAL]
    _LocalFree.restype = wintypes.HLOCAL

    _WIN_AVAILABLE = True
except (OSError, AttributeError):
    pass


def win_available() -> bool:
    """Check if advapi32 is loaded and usable."""
    return _WIN_AVAILABLE


def to_extended_path(path: str) -> str:
    """Convert an absolute path to \\\\?\\ extended form for long paths.

    Local:  C:\\foo  -> \\\\?\\C:\\foo
    UNC:    \\\\server\\share\\foo -> \\\\?\\UNC\\server\\share\\foo
    """
    if path.startswith("\\\\?\\"):
        return path
    path = os.path.abspath(path).replace("/", "\\")
    if path.startswith("\\\\"):
        return "\\\\?\\UNC\\" + path[2:]
    return "\\\\?\\" + path


def sid_to_string(sid: int) -> str:
    """Return the S-1-... form of a SID."""
    buf = wintypes.LPWSTR()
    if not _ConvertSidToStringSidW(sid, ctypes.byref(buf)):
        raise ctypes.WinError(ctypes.get_last_error())
    try:
        return buf.value or ""
    finally:
        _LocalFree(ctypes.cast(buf, wintypes.HLOCAL))


def sid_to_name(sid: int) -> str:
    """Resolve a SID to DOMAIN\\name, or its S-1-... form if it has no name."""
    name_len = wintypes.DWORD(0)
    domain_len = wintypes.DWORD(0)
    use = wintypes.DWORD(0)
    # First call sizes the buffers.
    _LookupAccountSidW(None, sid, None, ctypes.byref(name_len), None, ctypes.byref(domain_len), ctypes.byref(use))
    error_code = ctypes.get_last_error()
    if error_code != ERROR_INSUFFICIENT_BUFFER:
        log.debug("LookupAccountSidW sizing failed (%d); using SID string", error_code)
        return sid_to_string(sid)

    name = ctypes.create_unicode_buffer(name_len.value)
    domain = ctypes.create_unicode_buffer(domain_len.value)
    if not _LookupAccountSidW(None, sid, name, ctypes.byref(name_len), domain, ctypes.byref(domain_len), ctypes.byref(use)):
        log.debug("LookupAccountSidW failed (%d); using SID string", ctypes.get_last_error())
        return sid_to_string(sid)

    if domain.value:
        return f"{domain.value}\\{name.value}"
    return name.value


def _read_dacl(dacl: int) -> tuple[RawAce, ...]:
    if not dacl:
        # NULL DACL grants everyone full access.
        return (RawAce(EVERYONE, ALLOW, GENERIC_ALL),)

    info = ACL_SIZE_INFORMATION()
    if not _GetAclInformation(dacl, ctypes.byref(info), ctypes.sizeof(info), ACL_SIZE_INFORMATION_CLASS):
        raise ctypes.WinError(ctypes.get_last_error())

    aces: list[RawAce] = []
    for index in range(info.AceCount):
        ace_ptr = wintypes.LPVOID()
        if not _GetAce(dacl, index, ctypes.byref(ace_ptr)):
            raise ctypes.WinError(ctypes.get_last_error())
        header = ACE_HEADER.from_address(ace_ptr.value)
        effect = _ACE_EFFECTS.get(header.AceType)
        if effect is None:
            log.debug("ignoring ACE type %d", header.AceType)
            continue
        ace = ACCESS_ALLOWED_ACE.from_address(ace_ptr.value)
        sid = ace_ptr.value + ACCESS_ALLOWED_ACE.SidStart.offset
        aces.append(RawAce(sid_to_name(sid), effect, int(ace.Mask)))
    return tuple(aces)


def read_descriptor(path: str) -> SecurityDescriptor:
    """Query owner, group and DACL for a folder.

    Raises OSError with the Win32 error set, so access denied surfaces as
    PermissionError and a vanished path as FileNotFoundError.
    """
    if not _WIN_AVAILABLE:
        raise RuntimeError("advapi32 is not available on this host")

    owner_sid = wintypes.LPVOID()
    group_sid = wintypes.LPVOID()
    dacl = wintypes.LPVOID()
    sd = wintypes.LPVOID()
    info = OWNER_SECURITY_INFORMATION | GROUP_SECURITY_INFORMATION | DACL_SECURITY_INFORMATION

    error_code = _GetNamedSecurityInfoW(
        to_extended_path(path), SE_FILE_OBJECT, info,
        ctypes.byref(owner_sid), ctypes.byref(group_sid), ctypes.byref(dacl),
        None, ctypes.byref(sd),
    )
    if error_code != ERROR_SUCCESS:
        raise ctypes.WinError(error_code)

    try:
        owner = sid_to_name(owner_sid.value) if owner_sid.value else ""
        group = sid_to_name(group_sid.value) if group_sid.value else ""
        aces = _read_dacl(dacl.value or 0)
        return SecurityDescriptor(owner=owner, group=group, aces=aces)
    finally:
        _LocalFree(sd)
