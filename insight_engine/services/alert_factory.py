"""User-facing copy and severity for each kind of detected pattern."""
from __future__ import annotations

from insight_engine.models import schemas


def _format_threshold(threshold: float) -> str:
    if isinstance(threshold, float) and threshold.is_integer():
        return str(int(threshold))
    return str(threshold)


def build_detection(rule: schemas.PatternRule, max_streak: int) -> schemas.DetectionResult:
    """
    Turn a fired rule into a detection result with title, message and severity.

    Args:
        rule: Pattern rule whose condition produced a qualifying run
        max_streak: Longest qualifying run in the evaluated history

    Returns:
        DetectionResult carrying the copy for ``rule.rule_type``
    """
    conditions = rule.conditions
    metric = conditions.metric
    days = conditions.consecutive_days
    threshold = _format_threshold(conditions.threshold)

    if rule.rule_type == "low_connection":
        severity = "medium"
        title = "Connection Pattern Detected"
        message = (
            f"You've had {days}+ consecutive days with connection ratings ≤{threshold}/10. "
            "This might indicate a need for more quality time together."
        )
        suggested_action = "Plan a date night or try a new activity together to reconnect."
    elif rule.rule_type == "low_mood":
        severity = "high"
        title = "Mood Pattern Detected"
        message = (
            f"You've had {days}+ consecutive days with mood ratings ≤{threshold}/10. "
            "Consider what might be affecting your overall well-being."
        )
        suggested_action = (
            "Take time for self-care and consider talking to your partner about what's on your mind."
        )
    elif rule.rule_type == "streak_achieved":
        severity = "low"
        title = "Achievement Unlocked! 🎉"
        message = (
            f"Congratulations! You've maintained {days}+ consecutive days with "
            f"{metric} ratings ≥{threshold}/10."
        )
        suggested_action = "Celebrate this win together and keep up the great work!"
    else:
        severity = "medium"
        title = "Pattern Detected"
        message = f"A pattern has been detected in your {metric} data."
        suggested_action = "Review your recent check-ins and reflect on what this pattern might mean."

    return schemas.DetectionResult(
        alert_type=rule.rule_type,
        severity=severity,
        title=title,
        message=message,
        suggested_action=suggested_action,
        pattern_data=schemas.PatternData(
            metric=metric,
            threshold=conditions.threshold,
            consecutive_days=days,
            current_streak=max_streak,
            rule_name=rule.rule_name,
        ),
    )
