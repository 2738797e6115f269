"""Loading evaluation reports from JSON or YAML files.

A reports file holds either a list of report payloads or a mapping with a
``reports`` key holding that list. Files ending in ``.json`` are parsed as
JSON; anything else goes through ``yaml.safe_load``, which also accepts
plain JSON.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from skillquorum.core.report import Report
from skillquorum.exceptions import ReportValidationError


def _read_payload(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReportValidationError(f"Cannot read {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ReportValidationError(f"Malformed reports file {path}: {exc}") from exc


def load_reports(path: Path) -> list[Report]:
    """Parse and validate every report in ``path``.

    Raises:
        ReportValidationError: If the file cannot be read or parsed, or any
            report payload is invalid. The message names the offending
            entry.
    """
    payload = _read_payload(path)
    if isinstance(payload, dict) and "reports" in payload:
        payload = payload["reports"]
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ReportValidationError(
            f"{path}: expected a list of reports, got {type(payload).__name__}"
        )

    reports: list[Report] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ReportValidationError(f"{path}: report #{index} is not a mapping")
        try:
            reports.append(Report.from_dict(item))
        except ReportValidationError as exc:
            raise ReportValidationError(f"{path}: report #{index}: {exc}") from exc
    return reports
