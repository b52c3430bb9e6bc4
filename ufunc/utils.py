"""
Logging setup and performance measurement helpers for ufunc.

The library itself only creates named loggers under 'ufunc'; applications
and tests call setup_logging() to attach handlers.
"""

import gc
import logging
import sys
import time
import tracemalloc
from typing import Any, Callable, List, Optional

from .models import OperationMetrics, PerformanceSummary, Settings

_performance_metrics: List[OperationMetrics] = []


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Attach stdout (and optionally file) handlers to the 'ufunc' logger"""
    settings = settings or Settings.from_env()
    logger = logging.getLogger('ufunc')
    logger.setLevel(settings.log_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(settings.log_format)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def measure_performance(operation_name: str, func: Callable[..., Any], *args, **kwargs) -> OperationMetrics:
    """Run func under tracemalloc and record how long it took and its peak memory"""
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
    except Exception as e:
        _finish(operation_name, start_time, success=False, error=str(e))
        raise
    else:
        return _finish(
            operation_name,
            start_time,
            success=True,
            result_size=len(result) if hasattr(result, "__len__") else None,
        )
    finally:
        tracemalloc.stop()


def _finish(operation_name: str, start_time: float, **fields) -> OperationMetrics:
    execution_time_ms = (time.perf_counter() - start_time) * 1000
    _, peak = tracemalloc.get_traced_memory()
    metrics = OperationMetrics(
        operation=operation_name,
        execution_time_ms=execution_time_ms,
        memory_usage_mb=peak / 1024 / 1024,
        **fields,
    )
    _performance_metrics.append(metrics)
    return metrics


def get_performance_summary() -> PerformanceSummary:
    """Summary of all operations measured since the last clear"""
    count = len(_performance_metrics)
    if count == 0:
        return PerformanceSummary()

    total_time = sum(m.execution_time_ms for m in _performance_metrics)
    total_memory = sum(m.memory_usage_mb for m in _performance_metrics)
    return PerformanceSummary(
        total_operations=count,
        total_time_ms=total_time,
        total_memory_mb=total_memory,
        avg_time_ms=total_time / count,
        avg_memory_mb=total_memory / count,
    )


def get_performance_metrics() -> List[OperationMetrics]:
    return list(_performance_metrics)


def clear_performance_metrics() -> None:
    """Clear all performance metrics"""
    _performance_metrics.clear()
