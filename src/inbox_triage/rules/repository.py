from __future__ import annotations

import logging
from threading import Lock
from time import time
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from inbox_triage.rules.builtins import DEFAULT_RULES
from inbox_triage.rules.core import (
    CategoryRule,
    InvalidRuleError,
    RuleNotFoundError,
    coerce_rule_fields,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.8
REQUIRED_FIELDS = ("type", "condition", "value", "category")


class RuleRepository:
    """In-memory ordered rule table. Not persisted; resets with the process."""

    def __init__(self, rules: Optional[Iterable[CategoryRule]] = None) -> None:
        self._lock = Lock()
        self._seed: Tuple[CategoryRule, ...] = tuple(DEFAULT_RULES if rules is None else rules)
        self._rules: List[CategoryRule] = list(self._seed)

    def list(self) -> Tuple[CategoryRule, ...]:
        # Snapshot so classification never observes a half-applied write.
        with self._lock:
            return tuple(self._rules)

    def get(self, rule_id: str) -> CategoryRule:
        with self._lock:
            return self._rules[self._index_of(rule_id)]

    def add(self, data: Mapping[str, Any]) -> CategoryRule:
        missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, "")]
        if missing:
            raise InvalidRuleError(f"Missing required fields: {', '.join(missing)}")

        fields = coerce_rule_fields({name: data[name] for name in REQUIRED_FIELDS})
        # Falsy confidence means "unset".
        confidence = data.get("confidence") or DEFAULT_CONFIDENCE
        fields.update(coerce_rule_fields({"confidence": confidence}))

        with self._lock:
            rule = CategoryRule(id=self._next_id(), enabled=True, **fields)
            self._rules.append(rule)
        LOGGER.info("Created rule %s (%s %s %r -> %s)", rule.id, rule.type.value,
                    rule.condition.value, rule.value, rule.category.value)
        return rule

    def update(self, rule_id: str, changes: Mapping[str, Any]) -> CategoryRule:
        with self._lock:
            index = self._index_of(rule_id)
            updated = self._rules[index].with_changes(changes)
            self._rules[index] = updated
        LOGGER.info("Updated rule %s: %s", rule_id, sorted(changes))
        return updated

    def remove(self, rule_id: str) -> None:
        with self._lock:
            del self._rules[self._index_of(rule_id)]
        LOGGER.info("Deleted rule %s", rule_id)

    def reset(self) -> None:
        with self._lock:
            self._rules = list(self._seed)

    def _index_of(self, rule_id: str) -> int:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                return index
        raise RuleNotFoundError(rule_id)

    def _next_id(self) -> str:
        # Caller holds the lock.
        stamp = int(time() * 1000)
        taken = {rule.id for rule in self._rules}
        while f"rule-{stamp}" in taken:
            stamp += 1
        return f"rule-{stamp}"
