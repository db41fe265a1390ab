from __future__ import annotations

from typing import Tuple

from inbox_triage.categories import Category
from inbox_triage.rules.core import CategoryRule, Condition, RuleType

# Order matters: the first enabled matching rule wins.
DEFAULT_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(
        id="rule-1",
        type=RuleType.KEYWORDS,
        condition=Condition.CONTAINS,
        value="urgent|ASAP|deadline|immediate|emergency",
        category=Category.TO_RESPOND,
        confidence=0.9,
    ),
    CategoryRule(
        id="rule-2",
        type=RuleType.SUBJECT,
        condition=Condition.STARTS_WITH,
        value="Re:|Fwd:",
        category=Category.AWAITING_REPLY,
        confidence=0.8,
    ),
    CategoryRule(
        id="rule-3",
        type=RuleType.KEYWORDS,
        condition=Condition.CONTAINS,
        value="unsubscribe|newsletter|promotion|marketing|offer|deal",
        category=Category.MARKETING,
        confidence=0.85,
    ),
    CategoryRule(
        id="rule-4",
        type=RuleType.DOMAIN,
        condition=Condition.CONTAINS,
        value="noreply@|no-reply@|notifications@|updates@",
        category=Category.UPDATES,
        confidence=0.9,
    ),
    CategoryRule(
        id="rule-5",
        type=RuleType.KEYWORDS,
        condition=Condition.CONTAINS,
        value="invoice|payment|receipt|billing|subscription",
        category=Category.IMPORTANT,
        confidence=0.95,
    ),
    CategoryRule(
        id="rule-6",
        type=RuleType.SUBJECT,
        condition=Condition.STARTS_WITH,
        value="FYI:|For your information|Just so you know",
        category=Category.FYI,
        confidence=0.8,
    ),
    CategoryRule(
        id="rule-7",
        type=RuleType.KEYWORDS,
        condition=Condition.CONTAINS,
        value="coupon|discount|sale|free shipping|limited time",
        category=Category.PROMOTIONS,
        confidence=0.85,
    ),
)
