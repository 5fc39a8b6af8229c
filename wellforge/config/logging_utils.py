"""
Standardized logging utilities for consistent pipeline log messages.
"""
from wellforge.config.logging_config import logger


def _pad_stage(stage_name: str) -> str:
    return stage_name.ljust(20)


def log_operation_start(stage_name: str, record_count: int, **kwargs) -> None:
    """Log the start of a pipeline stage with standardized format."""
    extra_info = ""
    if kwargs:
        extra_parts = []
        for key, value in kwargs.items():
            extra_parts.append(f"{key}={value}")
        if extra_parts:
            extra_info = f" ({', '.join(extra_parts)})"

    logger.info(f"[{_pad_stage(stage_name)}] Starting on {record_count:,} rows{extra_info}")


def log_operation_success(stage_name: str, record_count: int, duration_seconds: float, **kwargs) -> None:
    """Log successful stage completion with standardized format."""
    throughput = int(record_count / duration_seconds) if duration_seconds > 0 else 0

    # Format message: [stage] Produced X rows in Y.Zs (T rows/sec)
    message = f"[{_pad_stage(stage_name)}] Produced {record_count:,} rows in {duration_seconds:.3f}s ({throughput:,} rows/sec)"
    if kwargs:
        message += " " + ", ".join(f"{key}={value}" for key, value in kwargs.items())

    logger.info(message)


def log_operation_read(stage_name: str, record_count: int, duration_seconds: float, source: str = "") -> None:
    """Log successful read with standardized format."""
    throughput = int(record_count / duration_seconds) if duration_seconds > 0 else 0

    message = f"[{_pad_stage(stage_name)}] Read {record_count:,} rows in {duration_seconds:.3f}s ({throughput:,} rows/sec)"
    if source:
        message += f" from {source}"

    logger.info(message)


def log_operation_error(stage_name: str, error_message: str, record_count: int = 0) -> None:
    """Log stage failure with standardized format."""
    if record_count > 0:
        logger.error(f"[{_pad_stage(stage_name)}] Failed processing {record_count:,} rows - {error_message}")
    else:
        logger.error(f"[{_pad_stage(stage_name)}] Failed - {error_message}")


def log_application_event(event: str, details: str = "") -> None:
    """Log pipeline-level events (run start, run end, etc.) with standardized format."""
    if details:
        logger.info(f"[{_pad_stage('pipeline')}] {event} - {details}")
    else:
        logger.info(f"[{_pad_stage('pipeline')}] {event}")
