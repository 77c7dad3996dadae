"""Create a sample folder tree for trying out aclaudit.

Usage: python scripts/create_fixtures.py <root_dir>

Creates:
  - projects/alpha/src    (three levels, for --depth checks)
  - projects/beta
  - shared                (world-writable on POSIX)
  - locked                (no permissions on POSIX; shows up as
                           "continuing ..." when not run as root)
"""

from __future__ import annotations

import os
import sys


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python create_fixtures.py <root_dir>", file=sys.stderr)
        sys.exit(1)

    root = sys.argv[1]
    if not os.path.isdir(root):
        print(f"Root does not exist: {root}", file=sys.stderr)
        sys.exit(1)

    for rel in ("projects/alpha/src", "projects/beta", "shared", "locked/hidden"):
        os.makedirs(os.path.join(root, *rel.split("/")), exist_ok=True)
        print(f"  created: {rel}")

    if os.name != "nt":
        os.chmod(os.path.join(root, "shared"), 0o777)
        print("  shared: mode 0777")
        os.chmod(os.path.join(root, "locked"), 0o000)
        print("  locked: mode 0000 (undo with chmod 700 before deleting)")

    count = sum(1 for _ in os.walk(root))
    print(f"  root contains {count} folders")


if __name__ == "__main__":
    main()
