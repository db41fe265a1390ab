from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping

from inbox_triage.categories import Category


class RuleType(str, Enum):
    SENDER = "sender"
    SUBJECT = "subject"
    CONTENT = "content"
    DOMAIN = "domain"
    KEYWORDS = "keywords"


class Condition(str, Enum):
    CONTAINS = "contains"
    EQUALS = "equals"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX = "regex"


class RuleError(Exception):
    """Base class for rule table errors."""


class RuleNotFoundError(RuleError, KeyError):
    def __init__(self, rule_id: str) -> None:
        super().__init__(rule_id)
        self.rule_id = rule_id

    def __str__(self) -> str:
        return f"Rule not found: {self.rule_id}"


class InvalidRuleError(RuleError, ValueError):
    pass


@dataclass(frozen=True)
class CategoryRule:
    id: str
    type: RuleType
    condition: Condition
    value: str
    category: Category
    confidence: float
    enabled: bool = True

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidRuleError(f"confidence must be within 0..1, got {self.confidence}")

    def with_changes(self, changes: Mapping[str, Any]) -> "CategoryRule":
        """Return a copy with validated partial updates applied (id is immutable)."""
        fields = coerce_rule_fields({k: v for k, v in changes.items() if k != "id"})
        return replace(self, **fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "condition": self.condition.value,
            "value": self.value,
            "category": self.category.value,
            "confidence": self.confidence,
            "enabled": self.enabled,
        }


def coerce_rule_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate and convert wire values into CategoryRule field values."""
    out: Dict[str, Any] = {}
    for key, value in data.items():
        try:
            if key == "type":
                out[key] = RuleType(value)
            elif key == "condition":
                out[key] = Condition(value)
            elif key == "category":
                out[key] = Category.parse(value)
            elif key == "value":
                if not isinstance(value, str) or not value:
                    raise ValueError("value must be a non-empty string")
                out[key] = value
            elif key == "confidence":
                if isinstance(value, bool):
                    raise ValueError("confidence must be a number")
                out[key] = float(value)
                if not 0.0 <= out[key] <= 1.0:
                    raise ValueError(f"confidence must be within 0..1, got {value}")
            elif key == "enabled":
                if not isinstance(value, bool):
                    raise ValueError("enabled must be a boolean")
                out[key] = value
            else:
                raise ValueError(f"Unknown rule field: {key}")
        except (TypeError, ValueError) as exc:
            raise InvalidRuleError(f"Invalid {key}: {exc}") from exc
    return out
