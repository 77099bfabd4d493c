"""
Structured JSON logging and in-memory metrics.
One JSON line per event, written to the stream the logger was built with.
A logger instance is passed explicitly to each component; /metrics reads its counters.
"""

import json
import sys
import threading
import uuid
from typing import Any, TextIO


class StructuredLogger:
    """JSON-line event logger with per-instance counters."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self._metrics: dict[str, Any] = {
            "requests_total": 0,
            "crisis_intercepts_total": 0,
            "degraded_searches_total": 0,
            "llm_failures_total": 0,
            "llm_parse_failures_total": 0,
            "by_severity": {},
        }

    def emit(self, event: str, **fields: Any) -> None:
        payload = {"event": event, **fields}
        stream = self._stream if self._stream is not None else sys.stderr
        print(json.dumps(payload, default=str), file=stream, flush=True)

    def _incr(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._metrics[key] = (self._metrics.get(key) or 0) + amount

    def log_request(
        self,
        *,
        request_id: str,
        endpoint: str,
        latency_ms: float,
        step: str | None = None,
        severity: str | None = None,
        degraded: bool | None = None,
        result_count: int | None = None,
    ) -> None:
        """One line per handled request. severity is final (after crisis override)."""
        self.emit(
            "request",
            request_id=request_id,
            endpoint=endpoint,
            latency_ms=round(latency_ms, 2),
            step=step,
            severity=severity,
            degraded=degraded,
            result_count=result_count,
        )
        self._incr("requests_total")
        if severity:
            with self._lock:
                by_severity = self._metrics.setdefault("by_severity", {})
                by_severity[severity] = (by_severity.get(severity) or 0) + 1

    def log_crisis_intercept(self, *, matched_terms: list[str], step: str | None) -> None:
        """Log when the crisis detector short-circuits a turn."""
        self.emit("crisis_intercept", matched_terms=matched_terms, step=step)
        self._incr("crisis_intercepts_total")

    def log_search_degraded(self, *, level: str, relaxed_levels: list[str], category: str | None) -> None:
        """Log when the fallback cascade had to relax the query."""
        self.emit("search_degraded", level=level, relaxed_levels=relaxed_levels, category=category)
        self._incr("degraded_searches_total")

    def log_llm_unavailable(self, *, step: str, error: str) -> None:
        """Log when the text-generation call failed or returned nothing."""
        self.emit("llm_unavailable", step=step, error=error[:300])
        self._incr("llm_failures_total")

    def log_llm_parse_failed(self, *, response_snippet: str) -> None:
        """Log when the assessment output had no parseable JSON object."""
        self.emit("llm_parse_failed", response_snippet=response_snippet[:500])
        self._incr("llm_parse_failures_total")

    def log_catalog_error(self, *, operation: str, error: str) -> None:
        self.emit("catalog_error", operation=operation, error=error[:300])

    def get_metrics(self) -> dict[str, Any]:
        """Return current counters as JSON-serializable dict."""
        with self._lock:
            snapshot = dict(self._metrics)
            snapshot["by_severity"] = dict(self._metrics.get("by_severity") or {})
        return snapshot


class NullLogger(StructuredLogger):
    """Counts like StructuredLogger but writes nothing. Default for library callers."""

    def emit(self, event: str, **fields: Any) -> None:
        return None


def generate_request_id() -> str:
    return str(uuid.uuid4())
