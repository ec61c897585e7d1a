from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from zipbackup.config import APP_NAME, APP_VERSION, DEFAULT_SIZE_CAP_LABEL, parse_size_cap
from zipbackup.core.backup import next_action, run_copy, run_package
from zipbackup.errors import BackupError

logger = logging.getLogger("zipbackup")


def _print_progress(processed: int, total: int) -> None:
    if processed == total or processed % 100 == 0:
        print(f"  {processed}/{total}")


def _size_cap(value: str) -> int:
    try:
        return parse_size_cap(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zipbackup",
        description=f"{APP_NAME}: copy a folder to a staging area, then pack it into size-capped ZIP files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    sub = parser.add_subparsers(dest="command")

    p_copy = sub.add_parser("copy", help="copy SOURCE into DEST/staging")
    p_copy.add_argument("source")
    p_copy.add_argument("dest")

    p_pack = sub.add_parser("package", help="pack DEST/staging into DEST/backup_<N>.zip")
    p_pack.add_argument("dest")
    p_pack.add_argument(
        "--size",
        type=_size_cap,
        default=parse_size_cap(DEFAULT_SIZE_CAP_LABEL),
        help='archive size cap: "100 MB", "200 MB", "500 MB" or a byte count (default: %(default)s bytes)',
    )
    p_pack.add_argument("--start-index", type=int, default=1)

    p_status = sub.add_parser("status", help="print which step is next for DEST")
    p_status.add_argument("dest")

    return parser


def run_gui(argv: List[str]) -> int:
    from PySide6.QtWidgets import QApplication

    from zipbackup.ui.main_window import MainWindow

    app = QApplication.instance() or QApplication(argv)
    window = MainWindow()
    window.show()
    return app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        return run_gui(sys.argv[:1])

    try:
        if args.command == "copy":
            summary = run_copy(args.source, args.dest, progress_cb=_print_progress)
            print(f"Copied {summary.copied} file(s) to {summary.staging_root}")
        elif args.command == "package":
            summary = run_package(args.dest, args.size, progress_cb=_print_progress, start_index=args.start_index)
            for archive in summary.archives:
                print(f"{archive.name}: {len(archive.entries)} file(s)")
            if summary.failed:
                print(f"{summary.failed} file(s) could not be archived; see {summary.log_path}")
        else:
            print(next_action(args.dest))
    except BackupError as e:
        logger.error("%s: %s", e.code, e)
        return 1
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
