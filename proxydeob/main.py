"""Command line interface for running the recovery pipeline.

Usage::

    python -m proxydeob.main [input.js] [output.js]

There are no flags.  Run options come from the environment:

``PROXYDEOB_SCHEMA``
    JSON file describing the proxy namespaces (defaults to the packaged one).
``PROXYDEOB_VERBOSE``
    Any of ``1``/``true``/``yes``/``on`` enables debug logging on stderr.
``PROXYDEOB_LOG_FILE``
    Write a debug log to this path.
``PROXYDEOB_REPORT``
    Write a JSON run report to this path.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from . import pipeline, utils
from .exceptions import DeobfuscationError
from .logging_config import configure_logging
from .schema import load_schema

DEFAULT_INPUT = Path("input.js")
DEFAULT_OUTPUT = Path("output.js")

_TRUTHY = {"1", "true", "yes", "on"}

LOG = logging.getLogger(__name__)


@dataclass
class RunOptions:
    schema_path: Optional[Path] = None
    verbose: bool = False
    log_file: Optional[Path] = None
    report_path: Optional[Path] = None


def _env_path(env: Mapping[str, str], name: str) -> Optional[Path]:
    value = env.get(name, "").strip()
    return Path(value) if value else None


def options_from_env(env: Optional[Mapping[str, str]] = None) -> RunOptions:
    """Read run options from ``env`` (``os.environ`` when ``None``)."""

    env = os.environ if env is None else env
    return RunOptions(
        schema_path=_env_path(env, "PROXYDEOB_SCHEMA"),
        verbose=env.get("PROXYDEOB_VERBOSE", "").strip().lower() in _TRUTHY,
        log_file=_env_path(env, "PROXYDEOB_LOG_FILE"),
        report_path=_env_path(env, "PROXYDEOB_REPORT"),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proxydeob",
        description="Recover literals and aliased expressions hidden behind proxy namespaces.",
    )
    parser.add_argument("input", nargs="?", default=str(DEFAULT_INPUT), help="obfuscated source file")
    parser.add_argument("output", nargs="?", default=str(DEFAULT_OUTPUT), help="destination file")
    return parser


def run(input_path: Path, output_path: Path, options: RunOptions) -> pipeline.Context:
    """Run the full pipeline for one file and return the finished context."""

    schema = load_schema(options.schema_path)
    ctx = pipeline.Context(input_path=input_path, output_path=output_path, schema=schema)
    timings = pipeline.run_pipeline(ctx)
    LOG.debug("pass timings:\n%s", utils.format_pass_summary(timings))
    LOG.info("recovery summary:\n%s", ctx.report.to_text())
    if options.report_path is not None:
        utils.write_json(options.report_path, utils.serialise_metadata(ctx.report.to_json()))
    return ctx


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    options = options_from_env()
    configure_logging(options.verbose, options.log_file)

    input_path = Path(args.input)
    output_path = Path(args.output)
    try:
        run(input_path, output_path, options)
    except (DeobfuscationError, OSError) as exc:
        LOG.error("failed processing %s: %s", input_path, exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI wrapper
    raise SystemExit(main())
