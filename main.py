#!/usr/bin/env python3
"""Compat shim that forwards to :mod:`proxydeob.main`.

Lets the tool run straight from a checkout (``python main.py in.js out.js``)
without installing the package first.
"""

from __future__ import annotations

import sys

from proxydeob import main as _cli


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``python main.py``."""

    return _cli.main(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":  # pragma: no cover - thin CLI shim
    raise SystemExit(main())
