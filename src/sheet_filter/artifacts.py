"""Run artifact persistence: projection report + manifest."""

from __future__ import annotations

from pathlib import Path

from sheet_filter.io import write_json
from sheet_filter.models import ProjectionReport, RunManifest


def write_projection_report(out_dir: Path, report: ProjectionReport) -> Path:
    """Write ``projection_report.json`` into *out_dir* and return the path."""
    return write_json(out_dir / "projection_report.json", report.to_dict())


def write_run_manifest(out_dir: Path, manifest: RunManifest) -> Path:
    """Write ``run_manifest.json`` into *out_dir* and return the path."""
    return write_json(out_dir / "run_manifest.json", manifest.to_dict())
