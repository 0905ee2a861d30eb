"""Logging setup for Minuet libraries and the practice pod.

Records are emitted one JSON object per line (or plain text in development)
and can carry melody context (label, mode, measure count) passed through
``extra=``. OpenTelemetry tracing is optional.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, Optional, TextIO

from .config import get_settings

try:
    # Optional OTEL tracing
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except Exception:  # pragma: no cover - OTEL is optional
    trace = None  # type: ignore

# Record attributes copied into the JSON payload when present
CONTEXT_FIELDS = ("melody_label", "melody_mode", "measure_count", "event_count", "bpm")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def melody_context(melody: Any) -> Dict[str, Any]:
    """``extra=`` mapping describing a generated melody."""
    return {
        "melody_label": getattr(melody, "label", None),
        "melody_mode": getattr(melody, "mode", None),
        "measure_count": getattr(melody, "measure_count", None),
        "event_count": len(getattr(melody, "events", ())),
    }


def _trace_ids() -> Dict[str, str]:
    if not trace:
        return {}
    ctx = trace.get_current_span().get_span_context()
    if not ctx or not ctx.trace_id:
        return {}
    return {"trace_id": format(ctx.trace_id, "032x"), "span_id": format(ctx.span_id, "016x")}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update(_trace_ids())
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Install a single root handler.

    Args:
        level: Log level name; defaults to MN_LOG_LEVEL
        fmt: 'json' or 'text'; defaults to MN_LOG_FORMAT
        stream: Output stream; defaults to stdout

    Returns:
        The installed handler.
    """
    s = get_settings()
    log_level = (level or s.MN_LOG_LEVEL).upper()
    log_format = (fmt or s.MN_LOG_FORMAT).lower()
    if log_format not in ("json", "text"):
        raise ValueError(f"Unknown log format: {log_format}")

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level, logging.INFO))
    return handler


def setup_tracing(service_name: str = "minuet-pod") -> bool:
    """Install an OTLP tracer provider when MN_OTEL_ENDPOINT is set.

    Returns True when tracing was enabled.
    """
    endpoint = get_settings().MN_OTEL_ENDPOINT
    if not endpoint or not trace:
        return False

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    trace.set_tracer_provider(provider)
    return True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = [
    "CONTEXT_FIELDS",
    "TEXT_FORMAT",
    "melody_context",
    "JsonFormatter",
    "setup_logging",
    "setup_tracing",
    "get_logger",
]
