"""Filesystem and formatting helpers shared by the CLI and passes."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import asdict, is_dataclass
from typing import Any, Mapping, Sequence, Tuple

_COLOR_CODES = {
    "red": "31",
    "green": "32",
    "yellow": "33",
    "blue": "34",
    "magenta": "35",
    "cyan": "36",
}


def _ensure_directory(path: str) -> str:
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    return directory


def _atomic_write_text(path: str | os.PathLike[str], writer, *, encoding: str = "utf-8") -> None:
    target = os.fspath(path)
    directory = _ensure_directory(target)
    fd, temp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".partial", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            writer(handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target)
    except BaseException:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


def read_text(path: str | os.PathLike[str], *, encoding: str = "utf-8") -> str:
    """Return the contents of ``path``; a leading BOM is dropped."""

    with open(path, "r", encoding=encoding) as handle:
        text = handle.read()
    return text[1:] if text.startswith("\ufeff") else text


def write_text(path: str | os.PathLike[str], content: str, *, encoding: str = "utf-8") -> None:
    """Write ``content`` to ``path`` atomically."""

    def _writer(handle) -> None:
        handle.write(content)

    _atomic_write_text(path, _writer, encoding=encoding)


def write_json(
    path: str | os.PathLike[str],
    obj: Any,
    *,
    encoding: str = "utf-8",
    sort_keys: bool = False,
) -> None:
    """Serialise ``obj`` as pretty JSON at ``path``."""

    def _writer(handle) -> None:
        json.dump(obj, handle, ensure_ascii=False, indent=2, sort_keys=sort_keys)

    _atomic_write_text(path, _writer, encoding=encoding)


def colorize_text(text: str, color: str, bold: bool = False) -> str:
    """Return *text* wrapped in ANSI color codes."""
    code = _COLOR_CODES.get(color, "0")
    style = "1;" if bold else ""
    return f"\033[{style}{code}m{text}\033[0m"


def serialise_metadata(value: Any) -> Any:
    """Return a JSON-serialisable representation of ``value``."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple, set)):
        return [serialise_metadata(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): serialise_metadata(item) for key, item in value.items()}
    if is_dataclass(value) and not isinstance(value, type):
        return {str(key): serialise_metadata(item) for key, item in asdict(value).items()}
    return repr(value)


def format_pass_summary(results: Sequence[Tuple[str, float]]) -> str:
    """Format ``results`` as a small table for console output."""

    if not results:
        return ""
    name_width = max(len(name) for name, _ in results)
    lines = [f"{'Pass'.ljust(name_width)}  Duration"]
    for name, duration in results:
        lines.append(f"{name.ljust(name_width)}  {duration:.3f}s")
    return "\n".join(lines)


__all__ = [
    "colorize_text",
    "format_pass_summary",
    "read_text",
    "serialise_metadata",
    "write_json",
    "write_text",
]
