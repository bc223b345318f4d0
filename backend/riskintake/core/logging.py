import logging
import sys
from functools import lru_cache
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log directory (backend/logs/)
_LOG_DIR = Path(__file__).parent.parent.parent / "logs"

# Symbols used to draw the scoring flow
FLOW_SYMBOLS = {
    "start": "╔",
    "node": "║",
    "arrow": "→",
    "end": "╚",
    "route": "◆",
}


def _configure_root_logger(level: LogLevel, log_to_file: bool = True) -> None:
    """Configure the root logger with console and file handlers."""
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    # Daily rotating file handler (keeps 7 days)
    if log_to_file:
        try:
            _LOG_DIR.mkdir(exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                _LOG_DIR / "riskintake.log",
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError:
            # Read-only deployments: console only
            pass

    root.setLevel(level)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    """
    Return a configured logger for the given module.

    Usage:
        from riskintake.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Message")
    """
    from riskintake.core.config import settings

    _configure_root_logger(settings.log_level, settings.log_to_file)
    return logging.getLogger(name)


class ScoringLogger:
    """Logger for tracing a scoring run end to end."""

    def __init__(self, component: str):
        self._logger = get_logger(f"scoring.{component}")
        self.component = component

    def run_start(self, form_id: str, submission_id: str) -> None:
        """Log the start of a scoring run."""
        self._logger.info(
            f"{FLOW_SYMBOLS['start']}══ SCORING START | form={form_id} | submission={submission_id}"
        )

    def run_end(self, submission_id: str, result) -> None:
        """Log the outcome of a scoring run."""
        self._logger.info(
            f"{FLOW_SYMBOLS['end']}══ SCORING COMPLETE | submission={submission_id} | "
            f"{result.risk_level.value} {result.normalized_score}/100 "
            f"({result.raw_score:g}/{result.max_possible_score:g})"
        )
        for section in result.section_scores:
            self._logger.debug(
                f"   {FLOW_SYMBOLS['route']} Section {section.order} '{section.title}': "
                f"{section.score:g}/{section.max_score:g} ({section.percentage:.1f}%)"
            )

    def unresolved_reference(self, form_id: str, reference: str) -> None:
        self._logger.warning(
            f"{FLOW_SYMBOLS['node']} Form '{form_id}': unknown question in condition "
            f"({reference}); evaluated as false"
        )

    def review_needed(self, submission_id: str, question_id: str, reason: str | None) -> None:
        """Log an answer that needs manual review."""
        self._logger.warning(
            f"{FLOW_SYMBOLS['node']} Submission '{submission_id}': question '{question_id}' "
            f"{FLOW_SYMBOLS['arrow']} manual review | {reason or 'flagged'}"
        )

    def error(self, step: str, error: Exception) -> None:
        self._logger.error(
            f"{FLOW_SYMBOLS['node']} [{step.upper()}] ERROR: {type(error).__name__}: {error}",
            exc_info=True,
        )

    def debug(self, step: str, message: str) -> None:
        self._logger.debug(f"{FLOW_SYMBOLS['node']} [{step}] {message}")
