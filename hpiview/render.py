"""Render an archive catalog as an ANSI tree with bounded size and size labels."""

from __future__ import annotations

from .archive import Archive, Entry

TREE_DEFAULT_MAX_ENTRIES = 20_000
TREE_SIZE_LABEL_MIN_BYTES = 10 * 1024

DIR_COLOR = "\033[1;34m"
FILE_COLOR = "\033[38;5;252m"
BRANCH_COLOR = "\033[2;38;5;245m"
NOTE_COLOR = "\033[2;38;5;250m"
SIZE_COLOR = "\033[38;5;109m"
RESET = "\033[0m"


def format_size_label(size: int) -> str:
    """Return ``" [N KB]"`` for files of at least 10 KiB, otherwise ``""``."""
    if size < TREE_SIZE_LABEL_MIN_BYTES:
        return ""
    return f" [{size // 1024} KB]"


def _sorted_children(archive: Archive, entry: Entry) -> list[Entry]:
    children = list(archive.children(entry))
    children.sort(key=lambda child: (not child.is_directory, child.name.lower()))
    return children


def render_archive_tree(
    archive: Archive,
    no_color: bool = False,
    show_size_labels: bool = True,
    max_entries: int = TREE_DEFAULT_MAX_ENTRIES,
) -> tuple[str, bool]:
    """Render the archive tree and return ``(text, truncated)``."""
    if no_color:
        dir_color = file_color = branch_color = note_color = size_color = reset = ""
    else:
        dir_color, file_color, branch_color = DIR_COLOR, FILE_COLOR, BRANCH_COLOR
        note_color, size_color, reset = NOTE_COLOR, SIZE_COLOR, RESET

    lines_out: list[str] = [f"{dir_color}{archive.name}/{reset}", ""]
    if archive.root is None:
        return "\n".join(lines_out), False
    emitted = 0
    # Frames are (sorted children, next index, prefix).
    stack: list[tuple[list[Entry], int, str]] = [(_sorted_children(archive, archive.root), 0, "")]
    while stack and emitted < max_entries:
        children, idx, prefix = stack.pop()
        if idx >= len(children):
            continue
        stack.append((children, idx + 1, prefix))
        child = children[idx]
        last = idx == len(children) - 1
        branch = "└─ " if last else "├─ "
        suffix = "/" if child.is_directory else ""
        name_color = dir_color if child.is_directory else file_color
        size_label = ""
        if show_size_labels and not child.is_directory:
            label = format_size_label(child.size)
            if label:
                size_label = f"{size_color}{label}{reset}"
        lines_out.append(f"{branch_color}{prefix}{branch}{reset}{name_color}{child.name}{suffix}{reset}{size_label}")
        emitted += 1
        if child.is_directory:
            stack.append((_sorted_children(archive, child), 0, prefix + ("   " if last else "│  ")))

    truncated = emitted < len(archive.catalog) - 1
    if truncated:
        lines_out.append("")
        lines_out.append(f"{note_color}... truncated after {max_entries} entries ...{reset}")
    return "\n".join(lines_out), truncated


def format_catalog_row(entry: Entry) -> str:
    """One ``--catalog`` line: kind, offset, size, path."""
    kind = "dir " if entry.is_directory else "file"
    path = entry.path or "/"
    return f"{kind} 0x{entry.offset:08x} {entry.size:>10} {path}"


__all__ = [
    "TREE_DEFAULT_MAX_ENTRIES",
    "TREE_SIZE_LABEL_MIN_BYTES",
    "format_catalog_row",
    "format_size_label",
    "render_archive_tree",
]
