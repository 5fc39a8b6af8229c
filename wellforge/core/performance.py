"""
Performance utilities for pipeline stages.
Contains stage timing and process resource metrics.
"""
import time
import psutil
from typing import Dict, Any
from contextlib import contextmanager


class PerformanceMonitor:
    """
    Records stage durations for a pipeline run.
    """

    def __init__(self):
        self.metrics = {}
        self.start_time = time.time()

    def record_metric(self, name: str, value: float, unit: str = "ms"):
        """Record a performance metric."""
        if name not in self.metrics:
            self.metrics[name] = []
        self.metrics[name].append({
            "value": value,
            "unit": unit,
            "timestamp": time.time()
        })

    def latest(self, name: str) -> float:
        """Latest recorded value for a metric, 0.0 when never recorded."""
        values = self.metrics.get(name)
        return values[-1]["value"] if values else 0.0

    def get_system_metrics(self) -> Dict[str, Any]:
        """Get current process resource metrics."""
        process = psutil.Process()
        memory = process.memory_info()

        return {
            "process_memory_mb": round(memory.rss / (1024 * 1024), 2),
            "uptime_seconds": round(time.time() - self.start_time, 3),
        }

    def reset(self):
        self.metrics = {}
        self.start_time = time.time()


# Global performance monitor
performance_monitor = PerformanceMonitor()


@contextmanager
def performance_context(operation_name: str, monitor: PerformanceMonitor = None):
    """
    Context manager for timing operations.
    """
    target = monitor or performance_monitor
    start_time = time.time()
    try:
        yield
    finally:
        execution_time = (time.time() - start_time) * 1000
        target.record_metric(f"{operation_name}_context", execution_time, "ms")
