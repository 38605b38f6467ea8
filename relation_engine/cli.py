import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from relation_engine.config import load_config
from relation_engine.domain.models import ProjectSchema
from relation_engine.engine import RelationEngine, RelationCommitReport
from relation_engine.exceptions import RelationEngineError, SchemaLoadError

from relation_engine.colored_logging import (
    setup_colored_logging,
    get_colored_logger,
    log_success,
    log_progress,
    log_highlight,
    log_section,
)

logger = get_colored_logger(__name__)


def load_project_snapshot(path: str) -> ProjectSchema:
    """
    Read a project document (YAML or JSON) and build a schema snapshot.

    Raises:
        SchemaLoadError: If the file is missing or malformed
    """
    project_file = Path(path)
    if not project_file.is_file():
        raise SchemaLoadError(f"Project file not found: {path}", source=path)
    try:
        with open(project_file, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SchemaLoadError(f"Error parsing project file {path}: {e}", source=path) from e
    except UnicodeDecodeError as e:
        raise SchemaLoadError(f"Project file {path} is not valid UTF-8: {e}", source=path) from e
    except OSError as e:
        raise SchemaLoadError(f"Cannot read project file {path}: {e}", source=path) from e
    return ProjectSchema.from_dict(document or {})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relation-engine",
        description="Validate, audit and generate mapping code for the relations of a schema designer project.",
    )
    parser.add_argument("-c", "--config", help="Path to the YAML configuration file.")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose DEBUG logging."
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Validate every relation and report conflicts.")
    check_parser.add_argument("project", help="Project document (YAML or JSON).")

    suggest_parser = subparsers.add_parser("suggest", help="Print suggested relations as YAML.")
    suggest_parser.add_argument("project", help="Project document (YAML or JSON).")

    emit_parser = subparsers.add_parser("emit", help="Print mapping code for relations.")
    emit_parser.add_argument("project", help="Project document (YAML or JSON).")
    emit_parser.add_argument("-r", "--relation", help="Relation id or name (default: all relations).")

    return parser


def _log_report(report: RelationCommitReport) -> None:
    relation = report.relation
    label = f"{relation.name or '<unnamed>'} ({relation.source.entity_name} -> {relation.target.entity_name})"

    for error in report.validation.errors:
        logger.error(f"{label}: [{error.code}] {error.message}")
    for warning in report.validation.warnings:
        suffix = f" Suggestion: {warning.suggestion}" if warning.suggestion else ""
        logger.warning(f"{label}: [{warning.code}] {warning.message}.{suffix}")
    for conflict in report.conflicts:
        message = f"{label}: [{conflict.type.value}] {conflict.message}"
        if conflict in report.blocking_conflicts:
            logger.error(message)
        else:
            logger.warning(message)

    if report.accepted:
        log_success(logger, f"{label}: accepted")


def run_check(engine: RelationEngine, schema: ProjectSchema) -> int:
    log_section(logger, "Relation Audit")
    log_progress(logger, f"Checking {len(schema.relations)} relation(s)...")
    reports = engine.audit(schema)
    for report in reports:
        _log_report(report)

    rejected = [r for r in reports if not r.accepted]
    if rejected:
        logger.error(f"{len(rejected)} of {len(reports)} relation(s) rejected.")
        return 1
    log_success(logger, f"All {len(reports)} relation(s) accepted.")
    return 0


def run_suggest(engine: RelationEngine, schema: ProjectSchema) -> int:
    log_progress(logger, f"Analyzing {len(schema.entities)} entities...")
    suggestions = engine.suggest(schema)
    log_highlight(logger, f"Found {len(suggestions)} suggestion(s).")
    if suggestions:
        sys.stdout.write(yaml.safe_dump([s.to_dict() for s in suggestions], sort_keys=False, allow_unicode=True))
    return 0


def run_emit(engine: RelationEngine, schema: ProjectSchema, relation_ref: Optional[str]) -> int:
    relations = schema.relations
    if relation_ref:
        relations = [r for r in schema.relations if relation_ref in (r.id, r.name)]
        if not relations:
            logger.error(f"No relation with id or name '{relation_ref}'.")
            return 1

    exit_code = 0
    blocks: List[str] = []
    for relation in relations:
        validation = engine.validate_relation(relation, schema)
        if not validation.is_valid:
            logger.error(
                f"Skipping invalid relation '{relation.name}': "
                f"{', '.join(validation.error_codes)}"
            )
            exit_code = 1
            continue
        blocks.append(engine.generate_code(relation))

    if blocks:
        sys.stdout.write("\n\n".join(blocks) + "\n")
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)
    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    try:
        config = load_config(args.config)
        log_progress(logger, f"Loading project {args.project}...")
        schema = load_project_snapshot(args.project)
        engine = RelationEngine(config)

        if args.command == "check":
            return run_check(engine, schema)
        if args.command == "suggest":
            return run_suggest(engine, schema)
        return run_emit(engine, schema, args.relation)

    except RelationEngineError as e:
        logger.error(str(e), exc_info=args.verbose)
        return 1


# --- Script Entry Point ---
if __name__ == "__main__":
    sys.exit(main())
