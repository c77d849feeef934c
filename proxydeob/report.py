"""Structured recovery report helpers."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List


@dataclass
class RecoveryReport:
    """Summarises a single recovery run for maintainers."""

    input_path: str | None = None
    output_path: str | None = None
    schema: str | None = None
    tables_extracted: List[str] = field(default_factory=list)
    tables_missing: List[str] = field(default_factory=list)
    tables_decoded: List[str] = field(default_factory=list)
    properties_resolved: int = 0
    resolution_misses: int = 0
    skipped_writes: int = 0
    aliases_collected: int = 0
    aliases_inlined: int = 0
    output_length: int = 0
    timings: Dict[str, float] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_text(self) -> str:
        """Format the report as a human-readable summary."""

        lines: List[str] = []
        lines.append(f"Input: {self.input_path}")
        lines.append(f"Schema: {self.schema}")
        lines.append(
            "Tables extracted: " + (", ".join(self.tables_extracted) or "none")
        )
        if self.tables_missing:
            lines.append("Tables missing: " + ", ".join(self.tables_missing))
        lines.append("Tables decoded: " + (", ".join(self.tables_decoded) or "none"))
        lines.append(
            f"Properties resolved: {self.properties_resolved} "
            f"(misses: {self.resolution_misses})"
        )
        lines.append(
            f"Aliases inlined: {self.aliases_inlined} "
            f"(collected: {self.aliases_collected})"
        )
        lines.append(f"Write positions left untouched: {self.skipped_writes}")
        lines.append(f"Final output length: {self.output_length} chars")
        if self.output_path:
            lines.append(f"Output: {self.output_path}")
        if self.warnings:
            lines.append("Warnings:")
            lines.extend(f"  - {warning}" for warning in self.warnings)
        return "\n".join(lines)

    def to_json(self) -> Dict[str, object]:
        """Return a JSON-serialisable dictionary."""

        return asdict(self)


__all__ = ["RecoveryReport"]
