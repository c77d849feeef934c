"""Final rendering pass producing the recovered JavaScript file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, TYPE_CHECKING

from .. import utils
from ..js_ast import generate_source

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..pipeline import Context


LOG = logging.getLogger(__name__)


def _output_path(ctx: "Context") -> Path:
    if ctx.output_path is not None:
        return ctx.output_path
    return ctx.input_path.with_name(f"{ctx.input_path.stem}_deob.js")


def run(ctx: "Context") -> Dict[str, object]:
    assert ctx.tree is not None

    beautify = bool(ctx.options.get("beautify", True))
    rendered = generate_source(ctx.tree, beautify=beautify)
    if rendered and not rendered.endswith("\n"):
        rendered += "\n"
    ctx.output = rendered
    ctx.report.output_length = len(rendered)

    metadata: Dict[str, object] = {
        "length": len(rendered),
        "encoding": "utf-8",
        "written": False,
    }
    if ctx.options.get("dry_run"):
        metadata["skipped_write"] = True
        return metadata

    destination = _output_path(ctx)
    utils.write_text(destination, rendered)
    ctx.output_path = destination
    LOG.info("wrote %d characters to %s", len(rendered), destination)
    metadata["output_path"] = str(destination)
    metadata["written"] = True
    return metadata


__all__ = ["run"]
