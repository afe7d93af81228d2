"""
Structured logging for monitoring runs.

One process-wide StructuredLogger writes to the console and to a daily file
under logs/, appends keyword context to each line as JSON, and counts what a
run did: assessments per tier, snapshots stored or retained, notifications
queued or suppressed, and failures by exception type.

The engine modules log through the standard `logging` module only; the
counters belong to the pipeline (policywatch.monitor).
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SNAPSHOT_STATUSES = ("new", "updated", "retained")


def _empty_metrics() -> dict:
    metrics = {"assessments": 0}
    for status in SNAPSHOT_STATUSES:
        metrics[f"snapshots_{status}"] = 0
    metrics.update({
        "notifications_queued": 0,
        "notifications_suppressed": 0,
        "tiers": {},
        "errors_by_type": {},
    })
    return metrics


class StructuredLogger:
    """
    Console + file logger carrying the metrics of one monitoring run.

    Args:
        name: Logger name
        level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the daily log file (default: logs/)
        enable_file: Write logs to file; the file always receives DEBUG
        enable_console: Write logs to stdout
    """

    def __init__(
        self,
        name: str = "policywatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        numeric_level = getattr(logging, level.upper())
        self.logger = logging.getLogger(name)
        self.logger.setLevel(numeric_level)
        self.logger.handlers.clear()
        self.metrics = _empty_metrics()

        if enable_console:
            self._add_handler(logging.StreamHandler(sys.stdout), numeric_level, CONSOLE_FORMAT)

        if enable_file:
            log_dir = Path(log_dir) if log_dir is not None else Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"policywatch_{datetime.now().strftime('%Y%m%d')}.log"
            self._add_handler(logging.FileHandler(log_file, encoding="utf-8"), logging.DEBUG, FILE_FORMAT)

    def _add_handler(self, handler: logging.Handler, level: int, fmt: str) -> None:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
        self.logger.addHandler(handler)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def critical(self, message: str, **context):
        self._log(logging.CRITICAL, message, context)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Run metrics

    def record_assessment(self, tier: str, notify: bool):
        """Count one classified snapshot and whether it raised a notification."""
        self.metrics["assessments"] += 1
        tiers = self.metrics["tiers"]
        tiers[tier] = tiers.get(tier, 0) + 1
        self.metrics["notifications_queued" if notify else "notifications_suppressed"] += 1

    def record_snapshot(self, status: str):
        """Count a store outcome; statuses other than new/updated/retained are ignored."""
        if status in SNAPSHOT_STATUSES:
            self.metrics[f"snapshots_{status}"] += 1

    def record_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Snapshot of the counters; nested dicts are copied too."""
        metrics = dict(self.metrics)
        metrics["tiers"] = dict(self.metrics["tiers"])
        metrics["errors_by_type"] = dict(self.metrics["errors_by_type"])
        return metrics

    def log_metrics_summary(self):
        m = self.get_metrics()

        self.info("=== Monitoring Run Metrics ===")
        self.info(f"Assessments: {m['assessments']}")
        self.info(
            "Snapshots: "
            + ", ".join(f"{m[f'snapshots_{s}']} {s}" for s in SNAPSHOT_STATUSES)
        )
        self.info(
            f"Notifications: {m['notifications_queued']} queued, "
            f"{m['notifications_suppressed']} suppressed"
        )

        if m["tiers"]:
            self.info("Tiers:")
            for tier, count in sorted(m["tiers"].items()):
                self.info(f"  {tier}: {count}")

        if m["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in sorted(m["errors_by_type"].items()):
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "policywatch", level: Optional[str] = None, **kwargs) -> StructuredLogger:
    """
    Get or create the process-wide logger.

    The level defaults to POLICYWATCH_LOG_LEVEL, then INFO. Arguments only
    take effect on the first call.
    """
    global _global_logger

    if _global_logger is None:
        level = level or os.environ.get("POLICYWATCH_LOG_LEVEL", "INFO")
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the process-wide logger so the next get_logger() builds a fresh one."""
    global _global_logger
    _global_logger = None
