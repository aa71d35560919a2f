"""Loading of user-supplied preamble and postamble files."""

from __future__ import annotations

import os

from pcbmill.errors import ErrorCode, maybe_raise


def _lines(text: str) -> list[str]:
    """Split ``text`` the way line-by-line reading does: no empty trailing line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def preamble_from_text(text: str) -> str:
    """Turn free text into G-code comments, one per line.

    Lines holding only spaces and tabs become empty lines.  Round brackets
    are replaced by angle brackets so that they cannot end the comment early.
    """
    parts = []
    for line in _lines(text):
        if not line.replace(" ", "").replace("\t", ""):
            parts.append("\n")
        else:
            escaped = line.replace("(", "<").replace(")", ">")
            parts.append(f"( {escaped} )\n")
    return "".join(parts)


def _read(path: str | os.PathLike[str], kind: str, ignore_warnings: bool) -> str:
    """Contents of ``path``, or an empty string if it cannot be read and errors are ignored."""
    try:
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as stream:
            return stream.read()
    except OSError:
        maybe_raise(
            f'Cannot read {kind} file "{os.fspath(path)}"',
            ErrorCode.INVALID_PARAMETER,
            ignore_warnings,
        )
        return ""


def read_preamble_text(path: str | os.PathLike[str], ignore_warnings: bool = False) -> str:
    """Read a text file and return it as a block of G-code comments."""
    return preamble_from_text(_read(path, "preamble-text", ignore_warnings))


def read_preamble(path: str | os.PathLike[str], ignore_warnings: bool = False) -> str:
    """Read a G-code preamble file verbatim, followed by a newline."""
    return _read(path, "preamble", ignore_warnings) + "\n"


def read_postamble(path: str | os.PathLike[str], ignore_warnings: bool = False) -> str:
    """Read a G-code postamble file verbatim, followed by a newline."""
    return _read(path, "postamble", ignore_warnings) + "\n"