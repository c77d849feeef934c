"""Pass-based orchestration for the recovery pipeline.

Passes run strictly in order, each completing before the next starts:
parse, extract, decode, resolve, inline, render.  Every pass receives the
shared :class:`Context` and stores a metadata dictionary under its name.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import utils
from .exceptions import DeobfuscationError
from .js_ast import SourceTree, parse_program
from .report import RecoveryReport
from .schema import ProxySchema, load_schema
from .passes.extract import RawTable, run as extract_run
from .passes.decode_tables import run as decode_run
from .passes.resolve_properties import run as resolve_run
from .passes.inline_aliases import run as inline_run
from .passes.render import run as render_run

LOG = logging.getLogger(__name__)

PassFn = Callable[["Context"], None]


class PipelineExecutionError(DeobfuscationError):
    """Raised when a pass fails; the original error is chained."""

    def __init__(
        self,
        pass_name: str,
        error: BaseException,
        timings: List[Tuple[str, float]],
        duration: float,
    ) -> None:
        super().__init__(f"pass {pass_name} failed: {error}")
        self.pass_name = pass_name
        self.error = error
        self.timings = timings
        self.duration = duration


@dataclass
class Context:
    """Shared state threaded through individual pipeline passes."""

    input_path: Path
    output_path: Optional[Path] = None
    source: str = ""
    schema: ProxySchema = field(default_factory=load_schema)
    tree: Optional[SourceTree] = None
    raw_tables: Dict[str, RawTable] = field(default_factory=dict)
    decoded_tables: Dict[str, Any] = field(default_factory=dict)
    output: str = ""
    options: Dict[str, Any] = field(default_factory=dict)
    pass_metadata: Dict[str, Any] = field(default_factory=dict)
    report: RecoveryReport = field(default_factory=RecoveryReport)

    def __post_init__(self) -> None:
        self.input_path = Path(self.input_path)
        if self.output_path is not None:
            self.output_path = Path(self.output_path)
        self.report.input_path = str(self.input_path)
        self.report.schema = self.schema.name

    def ensure_source(self) -> str:
        """Load the input file unless the source was supplied directly."""

        if not self.source:
            self.source = utils.read_text(self.input_path)
        return self.source

    def record_metadata(self, name: str, metadata: Optional[Dict[str, Any]]) -> None:
        self.pass_metadata[name] = metadata or {}


class PassRegistry:
    def __init__(self) -> None:
        self._passes: Dict[str, Tuple[int, PassFn]] = {}

    def register_pass(self, name: str, fn: PassFn, order: int) -> None:
        self._passes[name] = (order, fn)

    def names(self) -> List[str]:
        return [name for _, name in sorted((order, name) for name, (order, _) in self._passes.items())]

    def run_passes(
        self,
        ctx: Context,
        skip: Optional[Iterable[str]] = None,
        only: Optional[Iterable[str]] = None,
    ) -> List[Tuple[str, float]]:
        selected: List[Tuple[int, str, PassFn]] = []
        skip_set = {name.strip() for name in (skip or []) if name}
        only_set = {name.strip() for name in (only or []) if name}

        for name, (order, fn) in self._passes.items():
            if skip_set and name in skip_set:
                continue
            if only_set and name not in only_set:
                continue
            selected.append((order, name, fn))
        selected.sort(key=lambda entry: (entry[0], entry[1]))

        timings: List[Tuple[str, float]] = []
        for _, name, fn in selected:
            start = time.perf_counter()
            try:
                fn(ctx)
            except Exception as exc:
                duration = time.perf_counter() - start
                LOG.error("pass %s failed after %.3fs: %s", name, duration, exc)
                raise PipelineExecutionError(name, exc, list(timings), duration) from exc
            duration = time.perf_counter() - start
            timings.append((name, duration))
            ctx.report.timings[name] = duration

            metadata = ctx.pass_metadata.get(name)
            summary_parts: List[str] = []
            if isinstance(metadata, dict):
                for key in ("resolved", "misses", "inlined", "collected"):
                    value = metadata.get(key)
                    if isinstance(value, int):
                        summary_parts.append(f"{key}={value}")
                missing = metadata.get("missing")
                if missing:
                    summary_parts.append(f"missing={','.join(missing)}")
            suffix = f" ({', '.join(summary_parts)})" if summary_parts else ""
            LOG.info("pass %s completed in %.3fs%s", name, duration, suffix)
        return timings


# ---------------------------------------------------------------------------
# Pass implementations


def _pass_parse(ctx: Context) -> None:
    source = ctx.ensure_source()
    ctx.tree = parse_program(source)
    ctx.record_metadata(
        "parse",
        {
            "input_length": len(source),
            "statements": ctx.tree.root.named_child_count,
        },
    )


def _pass_extract(ctx: Context) -> None:
    ctx.record_metadata("extract", extract_run(ctx))


def _pass_decode(ctx: Context) -> None:
    ctx.record_metadata("decode", decode_run(ctx))


def _pass_resolve(ctx: Context) -> None:
    ctx.record_metadata("resolve", resolve_run(ctx))


def _pass_inline(ctx: Context) -> None:
    ctx.record_metadata("inline", inline_run(ctx))


def _pass_render(ctx: Context) -> None:
    metadata = render_run(ctx)
    if ctx.output_path is not None:
        ctx.report.output_path = str(ctx.output_path)
    ctx.record_metadata("render", metadata)


PIPELINE = PassRegistry()
PIPELINE.register_pass("parse", _pass_parse, 10)
PIPELINE.register_pass("extract", _pass_extract, 20)
PIPELINE.register_pass("decode", _pass_decode, 30)
PIPELINE.register_pass("resolve", _pass_resolve, 40)
PIPELINE.register_pass("inline", _pass_inline, 50)
PIPELINE.register_pass("render", _pass_render, 60)


def run_pipeline(ctx: Context, **kwargs: Any) -> List[Tuple[str, float]]:
    """Run the default pass sequence over ``ctx``."""

    return PIPELINE.run_passes(ctx, **kwargs)


def recover_source(source: str, schema: Optional[ProxySchema] = None) -> str:
    """Recover ``source`` in memory and return the printed program."""

    ctx = Context(
        input_path=Path("<memory>"),
        source=source,
        schema=schema or load_schema(),
        options={"dry_run": True},
    )
    run_pipeline(ctx)
    return ctx.output


__all__ = [
    "Context",
    "PIPELINE",
    "PassRegistry",
    "PipelineExecutionError",
    "recover_source",
    "run_pipeline",
]
