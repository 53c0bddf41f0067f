"""Boundary match audit and feature-style artifact writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from .catalog import summarize_catalog
from .config import AppConfig
from .metrics import MatchMethod, ResolutionStats
from .models import DataValidationError, FilterCriteria
from .pipeline import SessionFactory, StyledFeature, build_pipeline, load_inputs
from .util import sha256_file, write_json


@dataclass(slots=True)
class MatchReport:
    """Outcome of resolving and styling every boundary feature."""

    output_path: Path | None = None
    styles_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


def run_match_report(
    cfg: AppConfig,
    *,
    criteria: FilterCriteria | None = None,
    session_factory: SessionFactory | None = None,
) -> MatchReport:
    """Resolve all boundary features against the catalog and write audit JSON."""
    report = MatchReport(
        output_path=cfg.paths.reports_dir / "match_report.json",
        styles_path=cfg.paths.reports_dir / "feature_styles.json",
    )
    active = criteria or FilterCriteria()
    try:
        inputs = load_inputs(cfg, session_factory=session_factory)
    except (DataValidationError, FileNotFoundError, ValueError) as exc:
        report.add_error(f"Failed loading inputs: {exc}")
        return report
    report.add_info(f"Loaded {len(inputs.catalog)} catalog entries from {cfg.paths.status_catalog}")

    stats = ResolutionStats()
    pipeline = build_pipeline(cfg, inputs, observer=stats)
    if pipeline.resolver.degraded:
        report.add_warning("Name mapping unavailable; resolution ran in fuzzy-only mode.")
    if not inputs.features:
        report.add_warning("No boundary features loaded; nothing to style.")

    styled = pipeline.restyle(inputs.features, active)
    matched_ids = {item.resolution.entity.id for item in styled if item.resolution.entity is not None}
    never_matched = [record.id for record in inputs.catalog if record.id not in matched_ids]
    if inputs.features and never_matched:
        report.add_warning(
            f"{len(never_matched)} catalog entries matched no boundary feature: "
            + _format_code_list(never_matched)
        )

    visible = sum(1 for item in styled if item.style.visible)
    report.summary = {
        "features_total": len(styled),
        "features_visible": visible,
        "features_unmapped": stats.counts[MatchMethod.NOT_FOUND],
        "catalog_total": len(inputs.catalog),
        "catalog_unmatched": len(never_matched),
    }

    payload = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "config_hash_sha256": sha256_file(cfg.source_path),
        "criteria": _criteria_to_dict(active),
        "summary": report.summary,
        "resolution": stats.to_dict(),
        "catalog": summarize_catalog(inputs.catalog),
        "catalog_unmatched": never_matched,
        "features": [_feature_entry(idx, item) for idx, item in enumerate(styled)],
    }
    write_json(report.output_path, payload)
    write_json(
        report.styles_path,
        [
            {"index": idx, "feature_id": item.feature.feature_id, **item.style.to_dict()}
            for idx, item in enumerate(styled)
        ],
    )
    report.add_info(
        "Match summary: "
        f"features_total={len(styled)}, "
        f"matched={stats.hits}, "
        f"unmapped={stats.counts[MatchMethod.NOT_FOUND]}, "
        f"visible={visible}"
    )
    report.add_info(f"Match report written to {report.output_path}")
    report.add_info(f"Feature styles written to {report.styles_path}")
    return report


def format_match_lines(report: MatchReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Boundary matching completed with no errors.")
    return lines


def _feature_entry(idx: int, item: StyledFeature) -> dict[str, Any]:
    entity = item.resolution.entity
    return {
        "index": idx,
        "feature_id": item.feature.feature_id,
        "name": item.resolution.name,
        "method": item.resolution.method.value,
        "entity_id": entity.id if entity is not None else None,
        "status": entity.status.value if entity is not None else None,
        "style": item.style.to_dict(),
    }


def _criteria_to_dict(criteria: FilterCriteria) -> dict[str, Any]:
    return {
        "statuses": sorted(status.value for status in criteria.statuses),
        "regions": sorted(criteria.regions),
        "search": criteria.search,
    }


def _format_code_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    head = ", ".join(values[:limit])
    return f"{head}, ... (+{len(values) - limit} more)"
