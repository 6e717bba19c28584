"""
API error logging, call timing and cache analytics for the storefront client layer.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Deque, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_PERFORMANCE_ENTRIES = 100
SLOW_CALL_THRESHOLD_SECONDS = 3.0


@dataclass
class PerformanceEntry:
    name: str
    duration: float
    success: bool
    cached: bool = False
    timestamp: datetime = field(default_factory=datetime.utcnow)


_cache_metrics: Dict[str, int] = {"hits": 0, "misses": 0}
_performance_metrics: Deque[PerformanceEntry] = deque(maxlen=MAX_PERFORMANCE_ENTRIES)
_fallback_events: Deque[Dict[str, Any]] = deque(maxlen=MAX_PERFORMANCE_ENTRIES)


def log_api_error(error: Exception, context: str, details: Optional[Dict[str, Any]] = None) -> None:
    merged: Dict[str, Any] = {}
    status_code = getattr(error, "status_code", None)
    code = getattr(error, "code", None)
    if isinstance(getattr(error, "details", None), dict):
        merged.update(error.details)
    if details:
        merged.update(details)
    logger.error(
        "[%s] %s (status=%s code=%s details=%s)",
        context,
        error,
        status_code,
        code,
        merged,
    )


def log_warning(message: str, context: str, details: Optional[Dict[str, Any]] = None) -> None:
    if details:
        logger.warning("[%s] %s %s", context, message, details)
    else:
        logger.warning("[%s] %s", context, message)


def log_info(message: str, context: str, details: Optional[Dict[str, Any]] = None) -> None:
    if details:
        logger.info("[%s] %s %s", context, message, details)
    else:
        logger.info("[%s] %s", context, message)


def log_fallback_usage(context: str, reason: str, details: Optional[Dict[str, Any]] = None) -> None:
    _fallback_events.append(
        {"context": context, "reason": reason, "details": details or {}, "timestamp": datetime.utcnow().isoformat()}
    )
    log_warning(f"Using fallback data: {reason}", context, details)


async def measure_api_call(
    name: str,
    api_call: Callable[[], Awaitable[T]],
    cached: bool = False,
    slow_threshold: float = SLOW_CALL_THRESHOLD_SECONDS,
) -> T:
    """Await ``api_call()`` and record how long it took and whether it succeeded."""
    start = time.perf_counter()
    success = True
    try:
        return await api_call()
    except BaseException:
        success = False
        raise
    finally:
        duration = time.perf_counter() - start
        _performance_metrics.append(PerformanceEntry(name=name, duration=duration, success=success, cached=cached))
        logger.debug("[Performance] %s %s%s: %.2fms", "ok" if success else "failed", name, " (cached)" if cached else "", duration * 1000)
        if duration > slow_threshold and not cached:
            log_warning(
                f"Slow API call detected: {duration * 1000:.2f}ms",
                "Performance",
                {"name": name, "duration": duration, "success": success},
            )


def record_cache_hit(key: str) -> None:
    _cache_metrics["hits"] += 1
    logger.debug("[Cache] hit: %s", key)


def record_cache_miss(key: str) -> None:
    _cache_metrics["misses"] += 1
    logger.debug("[Cache] miss: %s", key)


def get_cache_statistics() -> Dict[str, Any]:
    hits = _cache_metrics["hits"]
    misses = _cache_metrics["misses"]
    total = hits + misses
    hit_rate = (hits / total) * 100 if total else 0.0
    return {"hits": hits, "misses": misses, "hit_rate": round(hit_rate, 2), "total_requests": total}


def get_performance_summary() -> Dict[str, Any]:
    entries = list(_performance_metrics)
    if not entries:
        return {"count": 0, "average_duration": 0.0, "success_rate": 0.0, "slow_calls": 0}
    successes = sum(1 for e in entries if e.success)
    return {
        "count": len(entries),
        "average_duration": sum(e.duration for e in entries) / len(entries),
        "success_rate": round(successes / len(entries) * 100, 2),
        "slow_calls": sum(1 for e in entries if e.duration > SLOW_CALL_THRESHOLD_SECONDS),
    }


def get_fallback_events() -> list:
    return list(_fallback_events)


def reset_metrics() -> None:
    _cache_metrics["hits"] = 0
    _cache_metrics["misses"] = 0
    _performance_metrics.clear()
    _fallback_events.clear()
