"""Logging helpers for configuring per-run outputs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from . import utils

__all__ = ["configure_logging"]

_HANDLER_MARKER = "_proxydeob_handler"


class _ColourFormatter(logging.Formatter):
    COLOURS = {
        logging.DEBUG: "blue",
        logging.INFO: "green",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "magenta",
    }

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - trivial wrapper
        message = super().format(record)
        colour = self.COLOURS.get(record.levelno, "green")
        return utils.colorize_text(message, colour)


def _remove_installed_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Install stderr (and optionally file) handlers on the root logger.

    Handlers installed by an earlier call are replaced, so repeated runs in the
    same process do not duplicate output.  The stream handler shows warnings
    only unless ``verbose`` is set; the file handler always records debug
    traces using UTF-8.
    """

    root = logging.getLogger()
    _remove_installed_handlers(root)
    root.setLevel(logging.DEBUG if verbose or log_file else logging.WARNING)

    stream = logging.StreamHandler()
    stream.setLevel(logging.DEBUG if verbose else logging.WARNING)
    stream.setFormatter(_ColourFormatter("%(levelname)s: %(message)s"))
    setattr(stream, _HANDLER_MARKER, True)
    root.addHandler(stream)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        setattr(file_handler, _HANDLER_MARKER, True)
        root.addHandler(file_handler)

    return root
