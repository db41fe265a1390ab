from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from inbox_triage.models import CategorizationResult, Email
from inbox_triage.rules.classification import categorize_email
from inbox_triage.rules.core import CategoryRule

HIGH_CONFIDENCE = 0.8
NEEDS_REVIEW = 0.7


def bulk_categorize(
    emails: Sequence[Mapping[str, Any]],
    rules: Sequence[CategoryRule],
    *,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Categorize each email independently; output order follows input order."""
    results: List[Dict[str, Any]] = []
    for raw in emails:
        email = Email.from_dict(raw)
        result = categorize_email(email, rules, now=now)
        results.append({"id": raw.get("id"), **result.to_dict()})
    return results


def enrich_email(raw: Mapping[str, Any], result: CategorizationResult) -> Dict[str, Any]:
    enriched = dict(raw)
    enriched.update(
        {
            "category": result.category.value,
            "categoryColor": result.category.color,
            "aiConfidence": result.confidence,
            "aiReason": result.reason,
        }
    )
    # Fallback results carry no actions; a stale value from the input is dropped too.
    enriched.pop("suggestedActions", None)
    if result.suggested_actions is not None:
        enriched["suggestedActions"] = list(result.suggested_actions)
    return enriched


def process_email_batch(
    emails: Sequence[Mapping[str, Any]],
    rules: Sequence[CategoryRule],
    *,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    # A single failing email fails the whole batch; callers map that to one error.
    processed: List[Dict[str, Any]] = []
    for raw in emails:
        result = categorize_email(Email.from_dict(raw), rules, now=now)
        processed.append(enrich_email(raw, result))
    return summarize_batch(processed)


def summarize_batch(processed: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "processed": len(processed),
        "emails": processed,
        "stats": {
            "categorized": len(processed),
            "highConfidence": sum(1 for e in processed if e["aiConfidence"] > HIGH_CONFIDENCE),
            "needsReview": sum(1 for e in processed if e["aiConfidence"] < NEEDS_REVIEW),
        },
    }
