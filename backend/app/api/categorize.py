# backend/app/api/categorize.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from backend.app.store import get_rule_repository
from inbox_triage.models import Email, EmailMetadata
from inbox_triage.parsing.parser import PROVIDERS, email_to_dict
from inbox_triage.pipeline.orchestrator import bulk_categorize, process_email_batch
from inbox_triage.rules.classification import categorize_email
from inbox_triage.rules.repository import RuleRepository

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class CategorizeRequest(BaseModel):
    sender: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class BatchRequest(BaseModel):
    # Left untyped so a non-list yields our own 400 instead of a 422.
    emails: Any = None


class ProviderBatchRequest(BaseModel):
    messages: Any = None
    userAddress: Optional[str] = None


@router.post("/categorize")
def categorize_endpoint(
    body: CategorizeRequest,
    repo: RuleRepository = Depends(get_rule_repository),
) -> dict:
    if not body.sender or not body.subject:
        raise HTTPException(status_code=400, detail="Sender and subject are required")

    try:
        metadata = EmailMetadata.from_dict(body.metadata)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    email = Email(
        sender=body.sender,
        subject=body.subject,
        content=body.content or "",
        metadata=metadata,
    )
    try:
        result = categorize_email(email, repo.list())
    except Exception as exc:
        LOGGER.exception("Categorization error")
        raise HTTPException(status_code=500, detail="Failed to categorize email") from exc
    return result.to_dict()


@router.post("/categorize/bulk")
def bulk_categorize_endpoint(
    body: BatchRequest,
    repo: RuleRepository = Depends(get_rule_repository),
) -> dict:
    if not isinstance(body.emails, list):
        raise HTTPException(status_code=400, detail="Emails must be an array")

    try:
        results = bulk_categorize(body.emails, repo.list())
    except Exception as exc:
        LOGGER.exception("Bulk categorization error")
        raise HTTPException(status_code=500, detail="Failed to categorize emails") from exc
    return {"results": results, "processed": len(body.emails)}


@router.post("/categorize/process")
def process_batch_endpoint(
    body: BatchRequest,
    repo: RuleRepository = Depends(get_rule_repository),
) -> dict:
    if not isinstance(body.emails, list):
        raise HTTPException(status_code=400, detail="Emails must be an array")

    try:
        summary = process_email_batch(body.emails, repo.list())
    except Exception as exc:
        LOGGER.exception("Email processing error")
        raise HTTPException(status_code=500, detail="Failed to process emails") from exc
    LOGGER.info(
        "Processed %s emails (%s high confidence, %s need review)",
        summary["processed"],
        summary["stats"]["highConfidence"],
        summary["stats"]["needsReview"],
    )
    return {"success": True, **summary}


@router.post("/categorize/providers/{provider}")
def process_provider_batch_endpoint(
    provider: str,
    body: ProviderBatchRequest,
    repo: RuleRepository = Depends(get_rule_repository),
) -> dict:
    normalize = PROVIDERS.get(provider.lower())
    if normalize is None:
        raise HTTPException(status_code=404, detail=f"Unknown provider: {provider}")
    if not isinstance(body.messages, list):
        raise HTTPException(status_code=400, detail="Messages must be an array")

    try:
        emails = [email_to_dict(normalize(msg, body.userAddress)) for msg in body.messages]
        summary = process_email_batch(emails, repo.list())
    except Exception as exc:
        LOGGER.exception("Provider batch processing error (provider=%s)", provider)
        raise HTTPException(status_code=500, detail="Failed to process emails") from exc
    return {"success": True, **summary}
