"""Structured logging with structlog, request correlation IDs, and embedding usage tracking."""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field

import structlog

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

_LEVELS = {"CRITICAL": 50, "ERROR": 40, "WARNING": 30, "INFO": 20, "DEBUG": 10}

# USD per 1M input tokens
EMBEDDING_PRICE_PER_1M = {
    "text-embedding-3-small": 0.02,
    "text-embedding-3-large": 0.13,
}
DEFAULT_EMBEDDING_PRICE_PER_1M = 0.02


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(cid: str | None = None) -> str:
    """Bind ``cid`` (or a fresh 16-hex-char id) to the current request context."""
    cid = cid or uuid.uuid4().hex[:16]
    correlation_id_var.set(cid)
    return cid


def add_correlation_id(logger: structlog.types.WrappedLogger, method_name: str, event_dict: dict) -> dict:
    cid = correlation_id_var.get()
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def _level_number(log_level: str) -> int:
    return _LEVELS.get(log_level.upper(), 20)


def configure_logging(log_level: str = "INFO") -> None:
    """Emit one JSON object per event on stdout, dropping events below ``log_level``."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            add_correlation_id,  # type: ignore[list-item]
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def estimate_embedding_cost(model: str, tokens: int) -> float:
    rate = EMBEDDING_PRICE_PER_1M.get(model, DEFAULT_EMBEDDING_PRICE_PER_1M)
    return tokens * rate / 1_000_000


@dataclass
class EmbeddingUsageTracker:
    """Accumulates token usage and estimated spend of embedding API calls."""

    calls: list[dict] = field(default_factory=list)

    def record(self, model: str, tokens: int, latency_ms: float) -> None:
        call = {
            "model": model,
            "tokens": tokens,
            "latency_ms": round(latency_ms, 1),
            "estimated_cost_usd": round(estimate_embedding_cost(model, tokens), 6),
        }
        self.calls.append(call)
        structlog.get_logger().info("embedding_usage", **call)

    @property
    def total_tokens(self) -> int:
        return sum(c["tokens"] for c in self.calls)

    @property
    def total_cost_usd(self) -> float:
        return float(sum(c["estimated_cost_usd"] for c in self.calls))
