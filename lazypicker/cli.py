"""Command-line front door for lazypicker.

Parses CLI options, builds a paged candidate source and the picker session,
then runs the interactive loop and prints the chosen item.
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from dataclasses import replace
from pathlib import Path

from .config import PickerOptions, load_key_bindings, load_picker_options
from .focus import PaneFocusManager
from .input import KeyBindingError, KeySequenceBuffer
from .paging import InMemoryPagedSource, PagedDataSource
from .paging.scheduler import MAX_PAGE_SIZE
from .picker import PickerEngine
from .runtime import TerminalController, render_picker, run_picker_loop

logger = logging.getLogger("lazypicker")


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _page_size(value: str) -> int:
    parsed = _positive_int(value)
    if parsed > MAX_PAGE_SIZE:
        raise argparse.ArgumentTypeError(f"value must be <= {MAX_PAGE_SIZE}")
    return parsed


def _non_negative_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pick one line from a large list with fuzzy search and vim-style keys."
    )
    parser.add_argument("path", nargs="?", default=None, help="File whose non-empty lines are the candidates.")
    parser.add_argument("--demo", type=_positive_int, metavar="N", help="Pick from N synthetic remote items.")
    parser.add_argument("--latency", type=_non_negative_float, default=0.0, help="Simulated seconds per page.")
    parser.add_argument("--page-size", type=_page_size, default=None, help="Items fetched per page.")
    parser.add_argument("--max-visible", type=_positive_int, default=None, help="Rows shown at once.")
    parser.add_argument("--no-fuzzy", action="store_true", help="Disable query filtering.")
    parser.add_argument(
        "--timeout",
        type=_non_negative_float,
        default=None,
        help="Cancel after this many idle seconds.",
    )
    parser.add_argument("--log-file", default=None, help="Write debug logs to this file.")
    return parser


def configure_logging(log_file: str | None) -> None:
    """Send logs to ``log_file``; otherwise keep them off the terminal."""
    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def options_from_args(args: argparse.Namespace, base: PickerOptions) -> PickerOptions:
    updates: dict[str, object] = {}
    if args.page_size is not None:
        updates["page_size"] = args.page_size
    if args.max_visible is not None:
        updates["max_visible_items"] = args.max_visible
    if args.no_fuzzy:
        updates["enable_fuzzy_search"] = False
    if args.timeout is not None:
        updates["picker_timeout"] = args.timeout or None
    return replace(base, **updates)


def build_source(args: argparse.Namespace) -> PagedDataSource[str]:
    if args.demo is not None:
        items = [f"item-{index:05d}" for index in range(args.demo)]
        return InMemoryPagedSource(items, latency=args.latency)
    path = Path(args.path)
    if not path.is_file():
        raise SystemExit(f"File not found: {path}")
    lines = [line.strip() for line in path.read_text(encoding="utf-8", errors="replace").splitlines()]
    return InMemoryPagedSource([line for line in lines if line], latency=args.latency)


def _open_tty_fd() -> int:
    """Return a readable tty fd even when stdin/stdout are redirected."""
    if sys.stdin.isatty():
        return sys.stdin.fileno()
    return os.open("/dev/tty", os.O_RDWR)


def main(argv: list[str] | None = None) -> int:
    """Run one interactive pick; return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.path is None and args.demo is None:
        parser.error("a PATH or --demo N is required")
    if args.path is not None and args.demo is not None:
        parser.error("cannot combine PATH with --demo")

    configure_logging(args.log_file)
    try:
        bindings = load_key_bindings()
    except KeyBindingError as exc:
        raise SystemExit(f"Invalid key bindings: {exc}") from exc
    options = options_from_args(args, load_picker_options())

    source = build_source(args)
    engine: PickerEngine[str] = PickerEngine(
        key_extractor=lambda line: (line,),
        options=options,
        source=source,
    )
    buffer = KeySequenceBuffer(bindings)
    focus = PaneFocusManager()

    tty_fd = _open_tty_fd()
    terminal = TerminalController(tty_fd, tty_fd)

    def render(current: PickerEngine[str], query_focused: bool) -> None:
        width = shutil.get_terminal_size((80, 24)).columns
        render_picker(terminal.write, current, str, width=width, query_focused=query_focused)

    outcome = run_picker_loop(engine, buffer, focus, terminal, tty_fd, render)
    if outcome.confirmed:
        sys.stdout.write(f"{outcome.item}\n")
        return 0
    reason = " (timeout)" if outcome.status == "timeout" else ""
    sys.stderr.write(f"Selection cancelled{reason}\n")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
