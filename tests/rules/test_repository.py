from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from inbox_triage.categories import Category
from inbox_triage.rules.builtins import DEFAULT_RULES
from inbox_triage.rules.core import Condition, InvalidRuleError, RuleNotFoundError, RuleType
from inbox_triage.rules.repository import RuleRepository


def _rule_data(**overrides):
    data = {
        "type": "sender",
        "condition": "ends_with",
        "value": "@corp.com",
        "category": "Important",
    }
    data.update(overrides)
    return data


def test_repository_is_seeded_with_builtin_rules_in_order() -> None:
    repo = RuleRepository()

    assert [r.id for r in repo.list()] == [f"rule-{i}" for i in range(1, 8)]
    assert repo.list() == DEFAULT_RULES


def test_add_appends_enabled_rule_with_default_confidence() -> None:
    repo = RuleRepository(rules=[])

    rule = repo.add(_rule_data())

    assert rule.id.startswith("rule-")
    assert rule.type is RuleType.SENDER
    assert rule.condition is Condition.ENDS_WITH
    assert rule.category is Category.IMPORTANT
    assert rule.confidence == 0.8
    assert rule.enabled is True
    assert repo.list() == (rule,)


def test_add_generates_unique_ids() -> None:
    repo = RuleRepository(rules=[])

    ids = {repo.add(_rule_data()).id for _ in range(5)}

    assert len(ids) == 5


@pytest.mark.parametrize(
    "overrides",
    [
        {"type": "attachment"},
        {"condition": "fuzzy"},
        {"category": "Spam"},
        {"confidence": 1.5},
        {"value": ""},
    ],
)
def test_add_rejects_invalid_fields(overrides) -> None:
    repo = RuleRepository(rules=[])

    with pytest.raises(InvalidRuleError):
        repo.add(_rule_data(**overrides))
    assert repo.list() == ()


def test_update_applies_partial_changes_and_keeps_id() -> None:
    repo = RuleRepository()

    updated = repo.update("rule-3", {"enabled": False, "confidence": 0.5, "id": "hijack"})

    assert updated.id == "rule-3"
    assert updated.enabled is False
    assert updated.confidence == 0.5
    assert updated.value == DEFAULT_RULES[2].value
    assert repo.get("rule-3") == updated


def test_update_and_remove_unknown_rule_raise_not_found() -> None:
    repo = RuleRepository()

    with pytest.raises(RuleNotFoundError):
        repo.update("rule-missing", {"enabled": False})
    with pytest.raises(RuleNotFoundError):
        repo.remove("rule-missing")


def test_remove_and_reset() -> None:
    repo = RuleRepository()

    repo.remove("rule-1")
    assert "rule-1" not in {r.id for r in repo.list()}

    repo.reset()
    assert repo.list() == DEFAULT_RULES


def test_concurrent_adds_and_updates_are_not_lost() -> None:
    repo = RuleRepository()
    count = 50

    with ThreadPoolExecutor(max_workers=8) as pool:
        added = list(pool.map(lambda i: repo.add(_rule_data(value=f"@team{i}.com")), range(count)))
        list(pool.map(lambda rule: repo.update(rule.id, {"enabled": False}), added))

    rules = repo.list()
    assert len(rules) == len(DEFAULT_RULES) + count
    assert len({r.id for r in rules}) == len(rules)
    assert all(not r.enabled for r in rules[len(DEFAULT_RULES):])
    assert {r.value for r in rules[len(DEFAULT_RULES):]} == {f"@team{i}.com" for i in range(count)}
