"""File-system rights table and bitmask decoding."""

from __future__ import annotations

# Windows file-system access rights
READ_DATA = 0x00000001  # ListDirectory on folders
WRITE_DATA = 0x00000002  # AddFile
APPEND_DATA = 0x00000004  # AddSubdirectory
READ_EA = 0x00000008
WRITE_EA = 0x00000010
EXECUTE = 0x00000020  # Traverse
DELETE_CHILD = 0x00000040
READ_ATTRIBUTES = 0x00000080
WRITE_ATTRIBUTES = 0x00000100
DELETE = 0x00010000
READ_CONTROL = 0x00020000
WRITE_DAC = 0x00040000
WRITE_OWNER = 0x00080000
SYNCHRONIZE = 0x00100000
ACCESS_SYSTEM_SECURITY = 0x01000000
MAXIMUM_ALLOWED = 0x02000000
GENERIC_ALL = 0x10000000
GENERIC_EXECUTE = 0x20000000
GENERIC_WRITE = 0x40000000
GENERIC_READ = 0x80000000

# Declaration order is presentation order.
RIGHTS_TABLE: tuple[tuple[int, str], ...] = (
    (READ_DATA, "ReadData/ListDirectory"),
    (WRITE_DATA, "WriteData/AddFile"),
    (APPEND_DATA, "AppendData/AddSubdirectory"),
    (READ_EA, "ReadExtendedAttributes"),
    (WRITE_EA, "WriteExtendedAttributes"),
    (EXECUTE, "ExecuteFile/Traverse"),
    (DELETE_CHILD, "DeleteSubdirectoriesAndFiles"),
    (READ_ATTRIBUTES, "ReadAttributes"),
    (WRITE_ATTRIBUTES, "WriteAttributes"),
    (DELETE, "Delete"),
    (READ_CONTROL, "ReadPermissions"),
    (WRITE_DAC, "ChangePermissions"),
    (WRITE_OWNER, "TakeOwnership"),
    (SYNCHRONIZE, "Synchronize"),
    (ACCESS_SYSTEM_SECURITY, "AccessSystemSecurity"),
    (MAXIMUM_ALLOWED, "MaximumAllowed"),
    (GENERIC_ALL, "GenericAll"),
    (GENERIC_EXECUTE, "GenericExecute"),
    (GENERIC_WRITE, "GenericWrite"),
    (GENERIC_READ, "GenericRead"),
)


def decode_rights(mask: int | str) -> list[str]:
    """Decode a rights bitmask into right names, in table order.

    Each table flag is tested independently, so one mask can match many
    names. A symbolic mask (a name the host already resolved) is returned
    unchanged as a single-element list.
    """
    if isinstance(mask, bool) or not isinstance(mask, int):
        return [mask]
    return [name for flag, name in RIGHTS_TABLE if mask & flag]
