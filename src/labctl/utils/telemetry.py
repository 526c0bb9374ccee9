"""Local log of labctl command outcomes (opt-out with ``LABCTL_TELEMETRY=0``).

Each line of ``<log_dir>/telemetry.jsonl`` is one command run, validated
against ``labctl/resources/telemetry.schema.json`` before it is written and
again when it is read back.
"""

from __future__ import annotations

import json
import os
import time
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator

import jsonschema

from labctl.settings import RuntimeSettings

LOG_NAME = "telemetry.jsonl"

_DISABLE_VALUES = {"0", "false", "no", "off"}

_TELEMETRY_VALIDATOR: jsonschema.Draft202012Validator | None = None


def telemetry_enabled() -> bool:
    value = os.getenv("LABCTL_TELEMETRY", "1").lower()
    return value not in _DISABLE_VALUES


def log_path(settings: RuntimeSettings) -> Path:
    return settings.log_dir / LOG_NAME


def record_structured_event(
    settings: RuntimeSettings,
    event: str,
    *,
    component: str,
    status: str,
    payload: Dict[str, Any] | None = None,
    duration_ms: float | None = None,
) -> None:
    """Append one command outcome; failed runs are logged at ``error`` level.

    Raises ``jsonschema.ValidationError`` for events labctl does not emit.
    """

    if not telemetry_enabled():
        return
    record: Dict[str, Any] = {
        "ts": time.time(),
        "event": event,
        "component": component,
        "status": status,
        "level": "error" if status == "failed" else "info",
        "version": settings.cli_version,
        "payload": payload or {},
    }
    if duration_ms is not None:
        record["durationMs"] = duration_ms
    _telemetry_validator().validate(record)
    path = log_path(settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False) + "\n")


def iter_events(settings: RuntimeSettings) -> Iterator[Dict[str, Any]]:
    """Yield logged events in order, skipping lines that no longer validate."""

    path = log_path(settings)
    if not path.exists():
        return
    validator = _telemetry_validator()
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                continue
            if validator.is_valid(record):
                yield record


def summarize(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    total = 0
    by_event: Dict[str, int] = {}
    by_status: Dict[str, int] = {}
    errors: Dict[str, int] = {}
    durations: Dict[str, list[float]] = {}
    for evt in events:
        total += 1
        by_event[evt["event"]] = by_event.get(evt["event"], 0) + 1
        by_status[evt["status"]] = by_status.get(evt["status"], 0) + 1
        if evt["status"] == "failed":
            name = evt["payload"]["error"]
            errors[name] = errors.get(name, 0) + 1
        if "durationMs" in evt:
            durations.setdefault(evt["event"], []).append(evt["durationMs"])
    return {
        "total": total,
        "by_event": by_event,
        "by_status": by_status,
        "errors": errors,
        "avg_duration_ms": {
            name: round(sum(values) / len(values), 3) for name, values in durations.items()
        },
    }


def clear(settings: RuntimeSettings) -> None:
    log_path(settings).unlink(missing_ok=True)


def _telemetry_validator() -> jsonschema.Draft202012Validator:
    global _TELEMETRY_VALIDATOR
    if _TELEMETRY_VALIDATOR is None:
        schema_resource = resources.files("labctl.resources") / "telemetry.schema.json"
        schema = json.loads(schema_resource.read_text(encoding="utf-8"))
        _TELEMETRY_VALIDATOR = jsonschema.Draft202012Validator(schema)
    return _TELEMETRY_VALIDATOR
