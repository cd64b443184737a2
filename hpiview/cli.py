"""Command-line front door for hpiview.

Parses CLI options, opens the target archive, and dispatches to tree output,
listings, extraction, or highlighted printing of one archived file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from . import config
from .archive import Archive, Entry, open_archive
from .errors import HpiError
from .highlight import colorize_source, decode_text, looks_binary, sanitize_terminal_text
from .render import format_catalog_row, render_archive_tree

_UNSAFE_SEGMENTS = {"", ".", ".."}


def configure_logging(verbose: bool) -> None:
    """Route library diagnostics to stderr at WARNING, or DEBUG when verbose."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", format="{level}: {message}")


def safe_destination(root: Path, entry: Entry) -> Path:
    """Map an entry to a path under ``root``, rejecting traversal segments."""
    parts: list[str] = []
    for segment in entry.segments:
        for part in segment.replace("\\", "/").split("/"):
            if part in _UNSAFE_SEGMENTS or ":" in part:
                raise SystemExit(f"Refusing unsafe archive path: {entry.path!r}")
            parts.append(part)
    return root.joinpath(*parts)


def _require_entry(archive: Archive, path: str) -> Entry:
    matches = archive.find_all(path)
    if not matches:
        raise SystemExit(f"Path '{path}' not found in archive.")
    entry = matches[0]
    if len(matches) > 1:
        wanted = path.replace("\\", "/").strip("/")
        entry = next((match for match in matches if match.path == wanted), entry)
        logger.warning("Path '{}' matches {} entries differing in case; using '{}'", path, len(matches), entry.path)
    if entry.is_directory:
        raise SystemExit(f"Path '{path}' is a directory.")
    return entry


def _read_or_exit(archive: Archive, entry: Entry) -> bytes:
    data = archive.read_file(entry)
    if data is None:
        raise SystemExit(f"Failed to extract '{entry.path}'.")
    return data


def extract_entry(archive: Archive, entry: Entry, destination: Path) -> int:
    data = _read_or_exit(archive, entry)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)
    return len(data)


def extract_all(archive: Archive, root: Path) -> tuple[int, list[str]]:
    """Extract every file under ``root``; return ``(written_count, failed_paths)``."""
    written = 0
    failed: list[str] = []
    for entry in archive.iter_files():
        destination = safe_destination(root, entry)
        data = archive.read_file(entry)
        if data is None:
            failed.append(entry.path)
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        written += 1
    return written, failed


def render_entry_text(data: bytes, name: str, style: str, no_color: bool) -> str:
    """Decode, sanitize, and optionally highlight one archived file's bytes."""
    text = sanitize_terminal_text(decode_text(data))
    if no_color:
        return text
    return colorize_source(text, name, style)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browse and extract HAPI (.hpi/.ufo/.ccx/.gp3) archives.")
    parser.add_argument("archive", help="Path to the archive.")
    parser.add_argument("--list", action="store_true", help="List archived files with their sizes.")
    parser.add_argument("--catalog", action="store_true", help="Print every catalog entry in post-order.")
    parser.add_argument("--extract", nargs=2, metavar=("PATH", "DEST"), help="Extract one archived file to DEST.")
    parser.add_argument("--extract-all", metavar="DIR", help="Extract every archived file under DIR.")
    parser.add_argument("--cat", metavar="PATH", help="Print one archived file with syntax highlighting.")
    parser.add_argument("--style", default=None, help="Pygments style name for --cat output.")
    parser.add_argument("--save-style", action="store_true", help="Persist --style as the default.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument(
        "--strict-size",
        action="store_true",
        default=None,
        help="Fail extraction when decoded size differs from the recorded size.",
    )
    parser.add_argument(
        "--packed-chunks",
        action="store_true",
        default=None,
        help="Address chunks back to back by their stored sizes.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug diagnostics.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the requested archive action.

    With no action flag the archive is printed as a tree.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    style = args.style if args.style is not None else config.load_style()
    if args.save_style and args.style is not None:
        config.save_style(args.style)
    strict_size = config.load_strict_size() if args.strict_size is None else args.strict_size
    packed_chunks = config.load_packed_chunks() if args.packed_chunks is None else args.packed_chunks

    archive_path = Path(args.archive)
    if not archive_path.is_file():
        raise SystemExit(f"Path not found: {archive_path}")

    try:
        archive = open_archive(archive_path, strict_size=strict_size, packed_chunks=packed_chunks)
    except HpiError as exc:
        raise SystemExit(f"{archive_path}: {exc}") from exc
    except OSError as exc:
        raise SystemExit(f"{archive_path}: {exc}") from exc

    with archive:
        if args.cat is not None:
            entry = _require_entry(archive, args.cat)
            data = _read_or_exit(archive, entry)
            if looks_binary(data):
                raise SystemExit(f"'{entry.path}' looks like binary data; use --extract instead.")
            text = render_entry_text(data, entry.name, style, args.no_color)
            sys.stdout.write(text if text.endswith("\n") else text + "\n")
            return

        acted = False
        if args.list:
            for entry in archive.iter_files():
                sys.stdout.write(f"{entry.size:>10}  {entry.path}\n")
            acted = True

        if args.catalog:
            for entry in archive.catalog:
                sys.stdout.write(format_catalog_row(entry) + "\n")
            acted = True

        if args.extract:
            entry_path, dest = args.extract
            entry = _require_entry(archive, entry_path)
            size = extract_entry(archive, entry, Path(dest))
            sys.stdout.write(f"Extracted {entry.path} -> {dest} ({size} bytes)\n")
            acted = True

        if args.extract_all:
            written, failed = extract_all(archive, Path(args.extract_all))
            sys.stdout.write(f"Extracted {written} files to {args.extract_all}\n")
            if failed:
                raise SystemExit("Failed to extract: " + ", ".join(failed))
            acted = True

        if not acted:
            text, _truncated = render_archive_tree(
                archive,
                no_color=args.no_color,
                show_size_labels=config.load_show_size_labels(),
            )
            sys.stdout.write(text + "\n")


if __name__ == "__main__":
    main()
