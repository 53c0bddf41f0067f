"""Validation layer for config and input datasets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .catalog import (
    DEFAULT_REGION,
    StatusCatalog,
    is_valid_email,
    load_region_table,
    load_status_catalog,
)
from .config import AppConfig
from .mapping import NameMappingTable, load_name_mapping
from .models import DataValidationError
from .util import is_url


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Local input file validator. Remote sources are not fetched."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        regions = self._validate_regions(report)
        catalog = self._validate_catalog(report, regions=regions)
        mapping = self._validate_mapping(report)
        if catalog is not None and mapping is not None:
            self._validate_mapping_drift(report, catalog=catalog, mapping=mapping)
        self._validate_geometry(report)
        return report

    def _validate_regions(self, report: ValidationReport) -> dict[str, str]:
        path = self.cfg.paths.regions
        if not path.exists():
            report.add_warning(f"Region table not found: {path}; all entities fall in 'Other'.")
            return {}
        try:
            regions = load_region_table(path)
        except ValueError as exc:
            report.add_error(f"Failed parsing region table '{path}': {exc}")
            return {}
        report.add_info(f"Loaded region assignments for {len(regions)} entities from {path}")
        return regions

    def _validate_catalog(
        self,
        report: ValidationReport,
        *,
        regions: dict[str, str],
    ) -> StatusCatalog | None:
        path = self.cfg.paths.status_catalog
        try:
            catalog = load_status_catalog(
                path,
                regions=regions,
                default_last_updated=self.cfg.catalog.default_last_updated,
            )
        except (DataValidationError, FileNotFoundError) as exc:
            report.add_error(f"Failed loading status catalog '{path}': {exc}")
            return None
        if len(catalog) == 0:
            report.add_error(f"Status catalog is empty: {path}")
            return None
        report.add_info(f"Loaded {len(catalog)} catalog entries from {path}")

        bad_emails = [
            record.id
            for record in catalog
            if record.contact_email and not is_valid_email(record.contact_email)
        ]
        if bad_emails:
            report.add_warning("Invalid contact email format: " + _format_code_list(bad_emails))

        if regions:
            unassigned = [record.id for record in catalog if record.region == DEFAULT_REGION]
            if unassigned:
                report.add_warning(
                    "Entities without a region assignment: " + _format_code_list(unassigned)
                )
            unknown = sorted(set(regions) - {record.id for record in catalog})
            if unknown:
                report.add_warning(
                    "Region table lists names missing from the catalog: " + _format_code_list(unknown)
                )
        return catalog

    def _validate_mapping(self, report: ValidationReport) -> NameMappingTable | None:
        if self.cfg.sources.name_mapping_url:
            report.add_info(
                f"Name mapping is remote ({self.cfg.sources.name_mapping_url}); not fetched during validation."
            )
            return None
        path = self.cfg.paths.name_mapping
        if not path.exists():
            report.add_warning(f"Name mapping not found: {path}; resolution will be fuzzy-only.")
            return None
        try:
            mapping = load_name_mapping(path)
        except DataValidationError as exc:
            report.add_error(f"Failed parsing name mapping '{path}': {exc}")
            return None
        if mapping is not None:
            report.add_info(f"Loaded {len(mapping)} name mapping entries from {path}")
        return mapping

    def _validate_mapping_drift(
        self,
        report: ValidationReport,
        *,
        catalog: StatusCatalog,
        mapping: NameMappingTable,
    ) -> None:
        orphaned = [key for key in mapping.entries if key not in catalog]
        if orphaned:
            report.add_warning(
                "Name mapping keys with no catalog entry: " + _format_code_list(orphaned)
            )
        unmapped = [record.id for record in catalog if record.id not in mapping]
        if unmapped:
            report.add_warning(
                "Catalog entries without a name mapping (fuzzy only): " + _format_code_list(unmapped)
            )
        if len(mapping.reverse_index) < len(mapping):
            report.add_warning("Several mapping keys share one authoritative name; first key wins.")

    def _validate_geometry(self, report: ValidationReport) -> None:
        source = self.cfg.geometry_source
        if is_url(source):
            report.add_info(f"Geometry is remote ({source}); not fetched during validation.")
            return
        if not self.cfg.paths.geometry.exists():
            report.add_warning(f"Geometry file not found: {self.cfg.paths.geometry}")


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Validation passed with no errors.")
    return lines


def _format_code_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    head = ", ".join(values[:limit])
    return f"{head}, ... (+{len(values) - limit} more)"
