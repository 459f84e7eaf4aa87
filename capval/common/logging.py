"""
Run log - one JSON Lines file per validation run.

Entries come in three levels:
- 1 PHASE:  population, selection, assembly, check
- 2 STEP:   files written within a phase, skipped work
- 3 DETAIL: each selected rule instance, each written file, each checker line

Files live in <logs_dir>/run_<id>/log_<datetime>.jsonl. Standard logging
records can be forwarded into the same file with setup_logging_bridge().
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = [
    "LogLevel",
    "LogStatus",
    "LogEntry",
    "RunLogger",
    "StepContext",
    "RunLoggerHandler",
    "new_run_id",
    "read_run_logs",
    "setup_logging_bridge",
    "teardown_logging_bridge",
]


class LogLevel(int, Enum):
    PHASE = 1
    STEP = 2
    DETAIL = 3


class LogStatus(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class LogEntry:
    """One line of the run log. None-valued fields are omitted on disk."""

    level: int
    phase: str
    status: str
    timestamp: str
    message: str
    step: str | None = None
    sequence: int | None = None
    duration_ms: int | None = None
    items_processed: int | None = None
    stats: dict[str, Any] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def new_run_id() -> str:
    """Timestamp-based run identifier, unique per microsecond."""
    return datetime.now().strftime("%Y%m%d%H%M%S%f")


def _ms_since(start: datetime) -> int:
    return int((datetime.now() - start).total_seconds() * 1000)


class RunLogger:
    """
    Append-only structured log of a single validation run.

    Usage:
        run_logger = RunLogger(new_run_id(), logs_dir="output/logs")
        run_logger.phase_start("population")
        with run_logger.step_start("model.adl") as step:
            step.items_processed = 1
        run_logger.phase_complete("population")
    """

    def __init__(self, run_id: str, logs_dir: str | Path = "output/logs"):
        self.run_id = run_id
        self.logs_dir = Path(logs_dir)
        self.run_dir = self.logs_dir / f"run_{run_id}"
        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.start_time = datetime.now()
        self.log_file = self.run_dir / f"log_{self.start_time:%Y%m%d_%H%M%S}.jsonl"

        self._current_phase: str | None = None
        self._phase_start: datetime | None = None
        self._step_sequence = 0

    def _write_entry(self, entry: LogEntry) -> None:
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def _emit(
        self,
        level: LogLevel,
        status: LogStatus,
        message: str,
        phase: str | None = None,
        **fields: Any,
    ) -> None:
        self._write_entry(
            LogEntry(
                level=level,
                phase=phase or self._current_phase or "unknown",
                status=status,
                timestamp=datetime.now().isoformat(),
                message=message,
                **fields,
            )
        )

    @property
    def current_phase(self) -> str | None:
        """The phase started last and not yet ended, if any."""
        return self._current_phase

    # -- phases ---------------------------------------------------------------

    def phase_start(self, phase: str, message: str = "") -> None:
        self._current_phase = phase
        self._phase_start = datetime.now()
        self._step_sequence = 0
        self._emit(LogLevel.PHASE, LogStatus.STARTED, message or f"Starting {phase}", phase)

    def _end_phase(self, phase: str, status: LogStatus, message: str, **fields: Any) -> None:
        duration = None
        if self._phase_start is not None and self._current_phase == phase:
            duration = _ms_since(self._phase_start)
        self._emit(LogLevel.PHASE, status, message, phase, duration_ms=duration, **fields)
        self._current_phase = None
        self._phase_start = None

    def phase_complete(
        self, phase: str, message: str = "", stats: dict[str, Any] | None = None
    ) -> None:
        self._end_phase(phase, LogStatus.COMPLETED, message or f"Completed {phase}", stats=stats)

    def phase_error(self, phase: str, error: str, message: str = "") -> None:
        self._end_phase(phase, LogStatus.ERROR, message or f"Error in {phase}", error=error)

    # -- steps ----------------------------------------------------------------

    def step_start(self, step: str, message: str = "") -> StepContext:
        """Open a step in the current phase; use the result as a context manager."""
        self._step_sequence += 1
        self._emit(
            LogLevel.STEP,
            LogStatus.STARTED,
            message or f"Starting {step}",
            step=step,
            sequence=self._step_sequence,
        )
        return StepContext(self, step, self._step_sequence)

    def step_complete(
        self,
        step: str,
        sequence: int,
        message: str = "",
        items_processed: int = 0,
        duration_ms: int | None = None,
        stats: dict[str, Any] | None = None,
    ) -> None:
        self._emit(
            LogLevel.STEP,
            LogStatus.COMPLETED,
            message or f"Completed {step}",
            step=step,
            sequence=sequence,
            items_processed=items_processed,
            duration_ms=duration_ms,
            stats=stats,
        )

    def step_error(
        self,
        step: str,
        sequence: int,
        error: str,
        message: str = "",
        duration_ms: int | None = None,
    ) -> None:
        self._emit(
            LogLevel.STEP,
            LogStatus.ERROR,
            message or f"Error in {step}",
            step=step,
            sequence=sequence,
            duration_ms=duration_ms,
            error=error,
        )

    def step_skipped(self, step: str, message: str = "") -> None:
        self._step_sequence += 1
        self._emit(
            LogLevel.STEP,
            LogStatus.SKIPPED,
            message or f"Skipped {step}",
            step=step,
            sequence=self._step_sequence,
        )

    # -- details --------------------------------------------------------------

    def detail_rule_selected(self, rule_id: str, levels: list[str] | None = None) -> None:
        self._emit(
            LogLevel.DETAIL,
            LogStatus.COMPLETED,
            f"Selected rule {rule_id}",
            self._current_phase or "selection",
            stats={"rule": rule_id, "levels": levels or []},
        )

    def detail_file_written(self, path: str, size: int) -> None:
        self._emit(
            LogLevel.DETAIL,
            LogStatus.COMPLETED,
            f"Wrote {path}",
            self._current_phase or "assembly",
            stats={"path": path, "bytes": size},
        )

    def detail_checker_line(self, line: str) -> None:
        """Record one relayed line of checker output, verbatim."""
        self._emit(LogLevel.DETAIL, LogStatus.COMPLETED, line, self._current_phase or "check")

    # -- reading --------------------------------------------------------------

    def get_log_path(self) -> Path:
        return self.log_file

    def read_logs(self, level: int | None = None) -> list[dict[str, Any]]:
        """Entries written so far, optionally only those of one level."""
        if not self.log_file.exists():
            return []
        return _read_jsonl(self.log_file, level)


class StepContext:
    """Completes its step on exit, or records the error if the block raised."""

    def __init__(self, logger: RunLogger, step: str, sequence: int):
        self.logger = logger
        self.step = step
        self.sequence = sequence
        self.start_time = datetime.now()
        self.items_processed = 0
        self.stats: dict[str, Any] | None = None
        self._completed = False

    def __enter__(self) -> StepContext:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.error(str(exc_val))
        elif not self._completed:
            self.complete()

    def complete(self, message: str = "") -> None:
        self._completed = True
        self.logger.step_complete(
            self.step,
            self.sequence,
            message=message,
            items_processed=self.items_processed,
            duration_ms=_ms_since(self.start_time),
            stats=self.stats,
        )

    def error(self, error: str, message: str = "") -> None:
        self._completed = True
        self.logger.step_error(
            self.step,
            self.sequence,
            error,
            message=message,
            duration_ms=_ms_since(self.start_time),
        )


def _read_jsonl(path: Path, level: int | None) -> list[dict[str, Any]]:
    entries = []
    with open(path, encoding="utf-8") as f:
        for raw in f:
            raw = raw.strip()
            if not raw:
                continue
            try:
                entry = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if level is None or entry.get("level") == level:
                entries.append(entry)
    return entries


def read_run_logs(
    run_id: str, logs_dir: str | Path = "output/logs", level: int | None = None
) -> list[dict[str, Any]]:
    """Entries of the newest log file of a run; empty if the run is unknown."""
    log_files = sorted((Path(logs_dir) / f"run_{run_id}").glob("log_*.jsonl"))
    if not log_files:
        return []
    return _read_jsonl(log_files[-1], level)


# =============================================================================
# Standard Logging Bridge
# =============================================================================


class RunLoggerHandler(logging.Handler):
    """Writes standard logging records into a RunLogger as DETAIL entries."""

    def __init__(self, run_logger: RunLogger, min_level: int = logging.WARNING):
        super().__init__(level=min_level)
        self.run_logger = run_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            is_problem = record.levelno >= logging.WARNING
            self.run_logger._emit(
                LogLevel.DETAIL,
                LogStatus.ERROR if is_problem else LogStatus.COMPLETED,
                message,
                self.run_logger.current_phase or "system",
                error=message if is_problem else None,
                stats={
                    "logger": record.name,
                    "level": record.levelname,
                    "module": record.module,
                    "funcName": record.funcName,
                    "lineno": record.lineno,
                },
            )
        except Exception:
            self.handleError(record)


def setup_logging_bridge(
    run_logger: RunLogger,
    min_level: int = logging.WARNING,
    logger_names: list[str] | None = None,
) -> RunLoggerHandler:
    """
    Forward records of the given loggers (default: root) into a run log.

    Returns:
        The installed handler, for teardown_logging_bridge()
    """
    handler = RunLoggerHandler(run_logger, min_level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    for name in logger_names or [None]:
        logging.getLogger(name).addHandler(handler)
    return handler


def teardown_logging_bridge(
    handler: RunLoggerHandler, logger_names: list[str] | None = None
) -> None:
    """Remove a handler installed by setup_logging_bridge()."""
    for name in logger_names or [None]:
        logging.getLogger(name).removeHandler(handler)
