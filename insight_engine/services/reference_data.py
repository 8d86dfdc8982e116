"""Loading of default pattern rules and guided exercises."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from insight_engine.models import schemas
from insight_engine.store.base import RecordStore
from insight_engine.store.result import ErrorKind


logger = logging.getLogger(__name__)


def load_reference_data(path: Path) -> dict[str, Any]:
    """Read the reference data YAML file."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data


def seed_reference_data(store: RecordStore, path: Path) -> dict[str, int]:
    """
    Insert default rules and exercises that are not yet stored.

    Rules are matched by name (a unique column). Exercises are matched by title
    against the active catalogue.

    Returns:
        Counts of inserted, skipped and invalid entries
    """
    data = load_reference_data(path)
    summary = {"rules_inserted": 0, "exercises_inserted": 0, "skipped": 0, "invalid": 0}

    for raw in data.get("pattern_rules", []):
        try:
            rule = schemas.PatternRuleCreate.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Invalid pattern rule in %s: %s", path, exc)
            summary["invalid"] += 1
            continue
        result = store.insert_rule(rule)
        if result.ok:
            summary["rules_inserted"] += 1
        elif result.error == ErrorKind.INTEGRITY:
            summary["skipped"] += 1
        else:
            logger.warning("Pattern rule %s not seeded (%s)", rule.rule_name, result.error.value)

    existing_titles = {exercise.title for exercise in store.list_exercises().unwrap_or([])}
    for raw in data.get("guided_exercises", []):
        try:
            exercise = schemas.GuidedExerciseCreate.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Invalid guided exercise in %s: %s", path, exc)
            summary["invalid"] += 1
            continue
        if exercise.title in existing_titles:
            summary["skipped"] += 1
            continue
        result = store.insert_exercise(exercise)
        if result.ok:
            summary["exercises_inserted"] += 1
            existing_titles.add(exercise.title)
        else:
            logger.warning("Exercise %s not seeded (%s)", exercise.title, result.error.value)

    logger.info("Reference data seeded: %s", summary)
    return summary
