"""
Logging configuration for the tagging pipeline.
"""

import logging
from typing import Any, Dict
from rich.console import Console
from rich.logging import RichHandler
from .config import settings


def setup_logging() -> None:
    """Configure clean, simple logging output."""

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
        handlers=[RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
            show_level=False,
            markup=True
        )],
        force=True
    )

    # Silence noisy third-party loggers
    logging.getLogger("onnxruntime").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def get_logger(name: str):
    """Get a standard logger instance."""
    return logging.getLogger(name)


class MetricsLogger:
    """Logger for tracking inference metrics."""

    def __init__(self):
        self.logger = get_logger("metrics")
        self.metrics: Dict[str, Any] = {
            "images_tagged": 0,
            "chunks_run": 0,
            "failures": 0,
            "inference_time": 0.0,
        }

    def log_chunk_complete(self, chunk_size: int, inference_time: float) -> None:
        """Log a successfully processed chunk."""
        self.metrics["chunks_run"] += 1
        self.metrics["images_tagged"] += chunk_size
        self.metrics["inference_time"] += inference_time

        self.logger.debug(
            f"Chunk done: {chunk_size} images | Time: {inference_time:.3f}s | "
            f"Total: {self.metrics['images_tagged']} images, {self.metrics['chunks_run']} chunks"
        )

    def log_run_failure(self, error: str) -> None:
        """Log a failed run."""
        self.metrics["failures"] += 1
        self.logger.warning(f"Tagging run failed | Error: {error}")

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics."""
        return self.metrics.copy()
