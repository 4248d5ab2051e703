"""Validation helpers for number mask configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from locale_support import DEFAULT_LOCALE, is_known_locale
from logger import LogCategory, get_logger
from number_mask import MaskConfig


@dataclass(frozen=True)
class ValidationIssue:
    """Represents a configuration validation problem."""

    field: str
    title: str
    message: str


class MaskConfigurationError(ValueError):
    """Raised when mask settings cannot produce a usable ``MaskConfig``."""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        summary = "; ".join(f"{issue.field}: {issue.title}" for issue in self.issues)
        super().__init__(f"Invalid number mask settings ({summary})")


def _check_locale(field: str, value: Any, *, required: bool) -> List[ValidationIssue]:
    if value is None or (isinstance(value, str) and not value.strip()):
        if not required:
            return []
        return [
            ValidationIssue(
                field=field,
                title="Locale Required",
                message="Provide a locale tag such as en-US or de-DE so separators can be resolved.",
            )
        ]
    if not isinstance(value, str):
        return [
            ValidationIssue(
                field=field,
                title="Locale Invalid",
                message="The locale must be given as text, for example en-US.",
            )
        ]
    if not is_known_locale(value):
        return [
            ValidationIssue(
                field=field,
                title="Unknown Locale",
                message=(
                    f"'{value}' is not a recognised locale. Use a language and region tag "
                    "such as en-US, de-DE or fr_FR."
                ),
            )
        ]
    return []


def validate_mask_settings(settings: Mapping[str, Any]) -> List[ValidationIssue]:
    """Validate a mask settings payload.

    Parameters
    ----------
    settings:
        Mapping with a ``locale`` key and an optional ``final_locale`` key.

    Returns
    -------
    list[ValidationIssue]
        A collection of validation issues. An empty list denotes success.
    """
    issues: List[ValidationIssue] = []
    issues.extend(_check_locale("locale", settings.get("locale"), required=True))
    issues.extend(_check_locale("final_locale", settings.get("final_locale"), required=False))

    unknown = sorted(set(settings) - {"locale", "final_locale"})
    for key in unknown:
        issues.append(
            ValidationIssue(
                field=key,
                title="Unsupported Setting",
                message=f"'{key}' is not a number mask setting. Only locale and final_locale are read.",
            )
        )
    return issues


def build_mask_config(settings: Mapping[str, Any] | None = None) -> MaskConfig:
    """Build a ``MaskConfig`` from settings, raising on any validation issue."""
    payload: Dict[str, Any] = {"locale": DEFAULT_LOCALE}
    if settings:
        payload.update(settings)

    issues = validate_mask_settings(payload)
    if issues:
        error = MaskConfigurationError(issues)
        get_logger().error("Rejected number mask settings", exception=error,
                           category=LogCategory.CONFIG, settings=dict(payload))
        raise error

    final_locale = payload.get("final_locale") or None
    return MaskConfig(
        locale=payload["locale"].strip(),
        final_locale=final_locale.strip() if final_locale else None,
    )
