"""Ampersand checker invocation.

Runs `<ampersand> check <rules file>` with the output directory as working
directory, relays every line of its output verbatim and reports the exit
code. Launch failures are logged and reported in the result, never raised.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from capval.common.exceptions import CheckerError

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Outcome of one checker run."""

    exit_code: int | None = None
    lines: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class AmpersandChecker:
    """Wrapper around the Ampersand command line tool."""

    def __init__(self, executable: str | Path):
        self.executable = str(executable)

    def command(self, rules_file: str) -> list[str]:
        return [self.executable, "check", rules_file]

    def _launch(self, rules_file: str, cwd: str | Path) -> subprocess.Popen:
        try:
            return subprocess.Popen(
                self.command(rules_file),
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise CheckerError(f"Failed to run Ampersand: {e}") from e

    def check(
        self,
        rules_file: str,
        cwd: str | Path,
        on_line: Callable[[str], None] | None = None,
    ) -> CheckResult:
        """Check a rules file.

        Args:
            rules_file: Rules file name, relative to `cwd`
            cwd: Working directory (the output directory)
            on_line: Called with every relayed output line

        Returns:
            CheckResult with exit code and relayed lines
        """
        relay = on_line or (lambda line: logger.info(line))
        result = CheckResult()

        try:
            process = self._launch(rules_file, cwd)
        except CheckerError as e:
            result.error = str(e)
            logger.error(result.error)
            return result

        assert process.stdout is not None
        with process:
            for line in process.stdout:
                line = line.rstrip("\r\n")
                result.lines.append(line)
                relay(line)
            result.exit_code = process.wait()

        logger.debug(f"Ampersand exited with code {result.exit_code}")
        return result
