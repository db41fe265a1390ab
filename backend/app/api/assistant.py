# backend/app/api/assistant.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from openai import OpenAIError
from pydantic import BaseModel

from inbox_triage.assistant.client import (
    CHAT_FALLBACK,
    CHAT_SUGGESTIONS,
    AssistantUnavailableError,
    assistant_status,
    chat,
    fallback_reply,
    fallback_summary,
    generate_reply,
    get_openai_client,
    summarize_email,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class ReplyRequest(BaseModel):
    sender: Optional[str] = None
    subject: Optional[str] = None
    originalContent: Optional[str] = None
    userContext: str = "Professional business context"


class SummaryRequest(BaseModel):
    sender: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = None


class ChatRequest(BaseModel):
    message: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
    conversation: List[Dict[str, Any]] = []


@router.post("/ai/reply")
def reply_endpoint(body: ReplyRequest):
    if not body.sender or not body.subject or not body.originalContent:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: sender, subject, originalContent",
        )

    try:
        reply = generate_reply(
            get_openai_client(),
            sender=body.sender,
            subject=body.subject,
            original_content=body.originalContent,
            user_context=body.userContext,
        )
    except (AssistantUnavailableError, OpenAIError) as exc:
        LOGGER.warning("Reply generation failed: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "AI reply generation failed",
                "message": str(exc),
                "fallback": fallback_reply(body.subject, exc),
                "note": "AI service unavailable - using template response",
            },
        )

    return {
        "success": True,
        "reply": reply,
        "metadata": {
            "provider": "openai",
            "originalLength": len(body.originalContent),
            "replyLength": len(reply),
        },
    }


@router.post("/ai/summarize")
def summarize_endpoint(body: SummaryRequest):
    if not body.sender or not body.subject or not body.content:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: sender, subject, content",
        )

    try:
        summary = summarize_email(
            get_openai_client(),
            sender=body.sender,
            subject=body.subject,
            content=body.content,
        )
    except (AssistantUnavailableError, OpenAIError) as exc:
        LOGGER.warning("Summarization failed: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "AI summarization failed",
                "message": str(exc),
                "fallback": fallback_summary(body.sender, body.subject),
            },
        )

    return {
        "success": True,
        "summary": summary,
        "metadata": {
            "provider": "openai",
            "originalLength": len(body.content),
            "summaryLength": len(summary),
            "compressionRatio": f"{len(summary) / len(body.content):.2f}",
        },
    }


@router.post("/ai/chat")
def chat_endpoint(body: ChatRequest):
    if not body.message:
        raise HTTPException(status_code=400, detail="Missing required field: message")

    try:
        content = chat(
            get_openai_client(),
            message=body.message,
            context=body.context,
            conversation=body.conversation,
        )
    except (AssistantUnavailableError, OpenAIError) as exc:
        LOGGER.warning("Chat failed: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "AI chat failed",
                "message": str(exc),
                "fallback": CHAT_FALLBACK,
            },
        )

    return {
        "success": True,
        "content": content,
        "suggestions": list(CHAT_SUGGESTIONS),
        "metadata": {
            "provider": "openai",
            "hasContext": body.context is not None,
            "conversationLength": len(body.conversation),
        },
    }


@router.get("/ai/status")
def status_endpoint() -> dict:
    return {"success": True, "status": assistant_status()}
