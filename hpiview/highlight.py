"""Text decoding, sanitization, and syntax highlighting for archived files.

Neutralizes terminal control bytes so printing an archived file cannot move
the cursor or ring the bell.
"""

from __future__ import annotations

import re

from pygments import highlight as _pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .config import DEFAULT_STYLE

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
BINARY_SNIFF_BYTES = 4_096

_FORMATTERS: dict[str, TerminalFormatter] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()


def decode_text(data: bytes) -> str:
    """Decode bytes using tolerant encoding fallback order.

    Attempts UTF-8 (dropping a leading BOM), then latin-1, which always
    succeeds.
    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def looks_binary(data: bytes) -> bool:
    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _normalize_style(style: str) -> str:
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return DEFAULT_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def pygments_highlight(source: str, name: str, style: str = DEFAULT_STYLE) -> str:
    """Highlight ``source`` with a lexer picked from the archived file ``name``."""
    formatter = _formatter_for_style(_normalize_style(style))
    try:
        lexer = get_lexer_for_filename(name, source)
    except ClassNotFound:
        lexer = TextLexer()
    return _pygments_highlight(source, lexer, formatter)


def colorize_source(source: str, name: str, style: str = DEFAULT_STYLE) -> str:
    rendered = pygments_highlight(source, name, style)
    if "\x1b[" in rendered:
        return rendered
    return source


__all__ = [
    "colorize_source",
    "decode_text",
    "looks_binary",
    "pygments_highlight",
    "sanitize_terminal_text",
]
