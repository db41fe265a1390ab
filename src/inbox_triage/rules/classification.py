from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from inbox_triage.categories import Category
from inbox_triage.models import CategorizationResult, Email, EmailMetadata
from inbox_triage.rules.conditions import evaluate, norm
from inbox_triage.rules.core import CategoryRule, RuleType

LOGGER = logging.getLogger(__name__)

URGENT_WORDS = ("urgent", "asap", "immediate", "deadline", "emergency")
SOCIAL_DOMAINS = ("linkedin.com", "facebook.com", "twitter.com", "instagram.com")
CHAT_PLATFORMS = frozenset({"slack", "telegram", "whatsapp"})
SOCIAL_PLATFORMS = frozenset({"instagram", "facebook"})
AWAITING_REPLY_AFTER = timedelta(hours=24)


def categorize_email(
    email: Email,
    rules: Sequence[CategoryRule],
    *,
    now: Optional[datetime] = None,
) -> CategorizationResult:
    """
    Decide a category for one email.

    Metadata checks run first, then the rule table in order (first enabled
    match wins), then the fallback heuristics. Always returns a result.
    """
    if email.metadata is not None:
        result = classify_by_metadata(email, email.metadata, now=now)
        if result is not None:
            return result

    result = classify_by_rules(email, rules)
    if result is not None:
        return result

    return classify_fallback(email)


def classify_by_metadata(
    email: Email,
    metadata: EmailMetadata,
    *,
    now: Optional[datetime] = None,
) -> Optional[CategorizationResult]:
    now = _aware(now or datetime.now(timezone.utc))
    subject = norm(email.subject)

    # 1) Own mail in a thread that nobody answered for a day.
    in_conversation = bool(metadata.conversation_id or metadata.thread_id)
    if metadata.sent_by_me and in_conversation and not metadata.has_reply:
        # Without a send time the elapsed time is unknown and the check cannot pass.
        sent_at = metadata.sent_date_time
        if sent_at is not None and now - _aware(sent_at) > AWAITING_REPLY_AFTER:
            return CategorizationResult(
                category=Category.AWAITING_REPLY,
                confidence=0.95,
                reason="You sent this message over 24 hours ago and no reply has arrived",
                suggested_actions=["Send a follow-up", "Set reminder", "Check if reply needed"],
            )

    # 2) Addressed to the user directly and flagged as urgent.
    if metadata.is_direct_recipient():
        urgent_subject = any(word in subject for word in URGENT_WORDS)
        high_importance = norm(metadata.importance) == "high"
        if urgent_subject or high_importance:
            return CategorizationResult(
                category=Category.TO_RESPOND,
                confidence=0.95,
                reason="Sent directly to you with urgent keywords or high importance",
                suggested_actions=["Reply immediately", "Mark as high priority", "Set follow-up reminder"],
            )

    # 3) Replies within an existing thread.
    has_reference = bool(metadata.in_reply_to or metadata.references)
    if subject.startswith("re:") and metadata.is_reply and has_reference:
        if metadata.original_sent_by_me:
            return CategorizationResult(
                category=Category.IMPORTANT,
                confidence=0.90,
                reason="Reply to a message you sent",
                suggested_actions=["Review reply", "Respond if needed", "Close the loop"],
            )
        return CategorizationResult(
            category=Category.FYI,
            confidence=0.85,
            reason="Reply in a thread you did not start",
            suggested_actions=["Read when convenient", "Archive if not relevant"],
        )

    # 4) Chat and social platforms.
    platform = norm(metadata.platform)
    if platform in CHAT_PLATFORMS:
        return CategorizationResult(
            category=Category.FYI,
            confidence=0.80,
            reason=f"Chat message from {platform}",
            suggested_actions=["Read in conversation view", "Reply in app if needed"],
        )
    if platform in SOCIAL_PLATFORMS:
        return CategorizationResult(
            category=Category.MARKETING,
            confidence=0.85,
            reason=f"Social notification from {platform}",
            suggested_actions=["Review notification", "Mute if noisy", "Archive"],
        )

    return None


def classify_by_rules(email: Email, rules: Sequence[CategoryRule]) -> Optional[CategorizationResult]:
    for rule in rules:
        if not rule.enabled:
            continue
        if rule_matches(rule, email):
            LOGGER.debug("Email %s matched %s", email.id or "<no id>", rule.id)
            return CategorizationResult(
                category=rule.category,
                confidence=rule.confidence,
                reason=f'Matched rule: {rule.type.value} {rule.condition.value} "{rule.value}"',
                suggested_actions=rule.category.suggested_actions,
            )
    return None


def rule_matches(rule: CategoryRule, email: Email) -> bool:
    if rule.type is RuleType.KEYWORDS:
        text = combined_text(email)
        return any(evaluate(text, keyword, rule.condition) for keyword in _keywords(rule.value))
    return evaluate(rule_haystack(rule.type, email), rule.value, rule.condition)


def rule_haystack(rule_type: RuleType, email: Email) -> str:
    if rule_type is RuleType.SENDER:
        return email.sender
    if rule_type is RuleType.SUBJECT:
        return email.subject
    if rule_type is RuleType.CONTENT:
        return email.content
    if rule_type is RuleType.DOMAIN:
        return email.sender_domain
    return combined_text(email)


def classify_fallback(email: Email) -> CategorizationResult:
    text = combined_text(email)
    if any(word in text for word in URGENT_WORDS):
        return CategorizationResult(
            category=Category.TO_RESPOND,
            confidence=0.7,
            reason="Detected urgent language in email content",
        )

    domain = norm(email.sender_domain)
    if any(social in domain for social in SOCIAL_DOMAINS):
        return CategorizationResult(
            category=Category.MARKETING,
            confidence=0.75,
            reason="Email from social media platform",
        )

    return CategorizationResult(
        category=Category.FYI,
        confidence=0.6,
        reason="Default categorization - no specific rules matched",
    )


def combined_text(email: Email) -> str:
    return norm(f"{email.sender} {email.subject} {email.content}")


def _keywords(value: str) -> List[str]:
    return [keyword for keyword in value.split("|") if keyword]


def _aware(value: datetime) -> datetime:
    # Naive timestamps are treated as UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
