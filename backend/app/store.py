from __future__ import annotations

from inbox_triage.rules.repository import RuleRepository

# Process-wide rule table; lost on restart.
rule_repository = RuleRepository()


def get_rule_repository() -> RuleRepository:
    return rule_repository
