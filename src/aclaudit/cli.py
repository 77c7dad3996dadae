"""AclAudit command line: walk, fetch, serialize, render."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from aclaudit import __version__
from aclaudit.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_RENDER_MODE,
    DEFAULT_REPORT_NAME,
    RENDER_MODES,
    get_log_level,
)
from aclaudit.document import build_document, load_document, save_document
from aclaudit.errors import AclAuditError, OutputExistsError
from aclaudit.fetcher import collect_records
from aclaudit.render import render, write_report
from aclaudit.walker import walk_folders

log = logging.getLogger(__name__)


def _non_negative(value: str) -> int:
    depth = int(value)
    if depth < 0:
        raise argparse.ArgumentTypeError("depth must be 0 or greater")
    return depth


def _common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--mode", choices=RENDER_MODES, default=DEFAULT_RENDER_MODE,
        help=f"report layout (default: {DEFAULT_RENDER_MODE})",
    )
    parser.add_argument(
        "-o", "--output", default=DEFAULT_REPORT_NAME,
        help=f"report file to create; must not exist (default: {DEFAULT_REPORT_NAME})",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR (default: $ACLAUDIT_LOG_LEVEL or INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aclaudit",
        description="Export folder owners, groups and permission grants to a report.",
    )
    parser.add_argument("root", help="folder to start from")
    parser.add_argument(
        "-d", "--depth", type=_non_negative, default=DEFAULT_MAX_DEPTH,
        help="levels below root to descend into; 0 reports the root only",
    )
    parser.add_argument("--dump", help="also write the intermediate XML document here")
    _common_options(parser)
    return parser


def build_render_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aclaudit-render",
        description="Render a report from a previously dumped XML document.",
    )
    parser.add_argument("document", help="XML document written by aclaudit --dump")
    _common_options(parser)
    return parser


def _check_output(path: str) -> None:
    if os.path.exists(path):
        raise OutputExistsError(f"Report already exists: {path}")


def run(root: str, depth: int, mode: str, output: str, dump: str | None = None) -> int:
    """Run a full scan and write the report. Returns the process exit code."""
    try:
        _check_output(output)
        walk = walk_folders(root, depth)
        records, denied = collect_records(walk.folders)
        doc = build_document(records, root=walk.folders[0], max_depth=depth)
        if dump:
            save_document(doc, dump)
        write_report(output, render(doc, mode))
    except AclAuditError as e:
        log.error("fatal: %s", e)
        return 1

    log.info(
        "exported %d folder(s); skipped %d unlistable, %d unreadable",
        len(doc.folders), len(walk.skipped), len(denied),
    )
    return 0


def rerender(document: str, mode: str, output: str) -> int:
    """Render an existing XML document. Returns the process exit code."""
    try:
        _check_output(output)
        doc = load_document(document)
        write_report(output, render(doc, mode))
    except AclAuditError as e:
        log.error("fatal: %s", e)
        return 1
    return 0


def _setup_logging(level_name: str | None) -> None:
    try:
        level = get_log_level(level_name)
    except RuntimeError as e:
        sys.exit(f"aclaudit: {e}")
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    """Entry point: aclaudit ROOT [options]."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level)
    sys.exit(run(args.root, args.depth, args.mode, args.output, args.dump))


def render_main(argv: list[str] | None = None) -> None:
    """Entry point: aclaudit-render DOCUMENT [options]."""
    args = build_render_parser().parse_args(argv)
    _setup_logging(args.log_level)
    sys.exit(rerender(args.document, args.mode, args.output))


if __name__ == "__main__":
    main()
