"""
Validation service - orchestrates a validation run end to end.

A run regenerates everything from the current collection:
1. population  - model.adl from the collection
2. selection   - applicable rule instances (partial mode only)
3. assembly    - rules.adl INCLUDE-ing model.adl
4. check       - `ampersand check rules.adl` in the output directory

Nothing is cached between runs; output files are overwritten.

Usage:
    from capval.services.validation import ValidationService

    service = ValidationService()
    result = service.validate(collection, mode="partial", on_line=print)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from capval.adapters.ampersand import AmpersandChecker
from capval.adapters.archimate.models import Collection
from capval.common.exceptions import GenerationError
from capval.common.logging import (
    RunLogger,
    new_run_id,
    setup_logging_bridge,
    teardown_logging_bridge,
)
from capval.common.types import StandaloneResult, ValidationResult
from capval.modules.validation import (
    PropertyTripleDialect,
    RelationDialect,
    assemble_rules,
    compute_level_profile,
    generate_population,
    select_from_profile,
)

from .config_models import CapvalSettings, ValidationMode

logger = logging.getLogger(__name__)


def write_output(path: Path, content: str) -> int:
    """
    Write a generated file, replacing any previous version.

    Returns:
        Number of bytes written

    Raises:
        GenerationError: If the file cannot be written
    """
    data = content.encode("utf-8")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        raise GenerationError(str(path), str(e)) from e
    logger.debug(f"Wrote {len(data)} bytes to {path}")
    return len(data)


class ValidationService:
    """Generate ADL files for a collection and check them with Ampersand."""

    def __init__(
        self,
        settings: CapvalSettings | None = None,
        checker: AmpersandChecker | None = None,
    ):
        self.settings = settings or CapvalSettings()
        self.checker = checker or AmpersandChecker(self.settings.ampersand_path)

    @property
    def output_dir(self) -> Path:
        return Path(self.settings.output_dir)

    def _run_logger(self) -> RunLogger | None:
        if not self.settings.run_logs:
            return None
        try:
            return RunLogger(run_id=new_run_id(), logs_dir=self.settings.logs_dir)
        except OSError as e:
            logger.warning(f"Run logging disabled: {e}")
            return None

    def _write(self, path: Path, content: str, run_logger: RunLogger | None) -> None:
        if run_logger is None:
            write_output(path, content)
            return
        with run_logger.step_start(path.name) as step:
            size = write_output(path, content)
            step.items_processed = 1
            step.stats = {"bytes": size}
        run_logger.detail_file_written(str(path), size)

    def generate(
        self,
        collection: Collection,
        mode: ValidationMode = "partial",
        run_logger: RunLogger | None = None,
    ) -> ValidationResult:
        """
        Write model.adl and rules.adl for a collection.

        Args:
            collection: Elements and relationships to validate
            mode: 'full' emits every universal rule, 'partial' the selected ones
            run_logger: Optional structured run log

        Returns:
            ValidationResult without check outcome
        """
        result: ValidationResult = {
            "success": False,
            "errors": [],
            "mode": mode,
            "collection": collection.label,
            "selected_rules": None,
            "files": {},
            "stats": {
                "elements": len(collection.elements),
                "relationships": len(collection.relationships),
            },
        }
        model_path = self.output_dir / self.settings.model_file
        rules_path = self.output_dir / self.settings.rules_file

        try:
            if run_logger:
                run_logger.phase_start("population")
            self._write(model_path, generate_population(collection), run_logger)
            result["files"]["model"] = str(model_path)
            if run_logger:
                run_logger.phase_complete("population", stats=result["stats"])

            selection = None
            if mode == "partial":
                if run_logger:
                    run_logger.phase_start("selection")
                profile = compute_level_profile(collection)
                selection = select_from_profile(profile)
                result["selected_rules"] = [str(s) for s in selection]
                result["stats"]["levels"] = profile.to_dict()
                if run_logger:
                    for instance in selection:
                        run_logger.detail_rule_selected(
                            str(instance), [instance.level] if instance.level else None
                        )
                    run_logger.phase_complete(
                        "selection", stats={"selected": len(selection)}
                    )

            if run_logger:
                run_logger.phase_start("assembly")
            dialect = RelationDialect(include=self.settings.model_file)
            self._write(rules_path, assemble_rules(dialect, selection), run_logger)
            result["files"]["rules"] = str(rules_path)
            if run_logger:
                run_logger.phase_complete("assembly")

        except GenerationError as e:
            result["errors"].append(str(e))
            if run_logger:
                run_logger.phase_error(run_logger.current_phase or "assembly", str(e))
            return result

        result["success"] = True
        return result

    def validate(
        self,
        collection: Collection,
        mode: ValidationMode = "partial",
        run_checker: bool = True,
        on_line: Callable[[str], None] | None = None,
    ) -> ValidationResult:
        """
        Run a full validation: generate files, then check them.

        Args:
            collection: Elements and relationships to validate
            mode: 'full' or 'partial'
            run_checker: If False, stop after writing the files
            on_line: Receives progress lines and every relayed checker line

        Returns:
            ValidationResult with check outcome when the checker ran
        """
        start = datetime.now()
        echo = on_line or (lambda line: logger.info(line))
        run_logger = self._run_logger()
        handler = (
            setup_logging_bridge(run_logger, logger_names=["capval"]) if run_logger else None
        )
        result: ValidationResult = {"success": False, "errors": [], "stats": {}}

        try:
            result = self.generate(collection, mode, run_logger)
            if not result["success"]:
                return result
            if not run_checker:
                if run_logger:
                    run_logger.phase_start("check")
                    run_logger.step_skipped("ampersand", "Checker disabled")
                    run_logger.phase_complete("check")
                return result

            rules = result["selected_rules"]
            echo(
                f"Validating {len(collection.elements)} elements and "
                f"{len(collection.relationships)} relationships in {collection.label} "
                f"against {', '.join(rules) if rules is not None else 'all rules'}:\n"
            )

            if run_logger:
                run_logger.phase_start("check")

            def relay(line: str) -> None:
                echo(line)
                if run_logger:
                    run_logger.detail_checker_line(line)

            outcome = self.checker.check(
                self.settings.rules_file, cwd=self.output_dir, on_line=relay
            )
            result["check"] = outcome.to_dict()

            if outcome.error:
                result["errors"].append(outcome.error)
                result["success"] = False
                if run_logger:
                    run_logger.phase_error("check", outcome.error)
            else:
                if run_logger:
                    run_logger.phase_complete(
                        "check",
                        stats={"exit_code": outcome.exit_code, "lines": len(outcome.lines)},
                    )
                echo("\nValidation completed.")

            return result
        finally:
            if handler:
                teardown_logging_bridge(handler, logger_names=["capval"])
            if run_logger:
                result["stats"]["run_log"] = str(run_logger.get_log_path())
            result["timestamp"] = datetime.now().isoformat()
            result["duration_ms"] = int((datetime.now() - start).total_seconds() * 1000)

    def export_standalone(self) -> StandaloneResult:
        """
        Write the standalone rules file for checking foreign Archi exports.

        The file INCLUDEs the configured Archi export and addresses levels
        through property triples instead of a generated level relation.
        """
        path = self.output_dir / self.settings.standalone_file
        dialect = PropertyTripleDialect(include=self.settings.standalone_include)
        try:
            write_output(path, assemble_rules(dialect))
        except GenerationError as e:
            return {"success": False, "errors": [str(e)], "path": str(path)}

        logger.info(f"File written: {path}")
        return {
            "success": True,
            "errors": [],
            "path": str(path),
            "include": self.settings.standalone_include,
        }
