from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from openai import OpenAI

from inbox_triage.config.settings import OPENAI_MODEL, SECRETS_DIR

LOGGER = logging.getLogger(__name__)

REPLY_CONTENT_LIMIT = 1500
SUMMARY_CONTENT_LIMIT = 2000

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant specialized in email management and analysis."
)

EMAIL_REPLY_PROMPT = """You are an expert email assistant. Generate a professional, contextually appropriate reply to the given email.

GUIDELINES:
- Match the tone of the original email (formal/informal)
- Be concise but complete
- Address all points raised in the original email
- Include appropriate greetings and closings
- Suggest specific next steps when relevant

ORIGINAL EMAIL:
From: {sender}
Subject: {subject}
Content: {original_content}

USER CONTEXT: {user_context}

Generate a professional reply that addresses the email appropriately. Return ONLY the email content without subject line."""

SMART_SUMMARY_PROMPT = """You are an expert email summarization AI. Create a concise, actionable summary of the given email.

FOCUS ON:
- Key information and main points
- Action items or requests
- Important deadlines or dates
- Next steps required
- People involved

EMAIL TO SUMMARIZE:
From: {sender}
Subject: {subject}
Content: {content}

Provide a clear, structured summary in 2-3 sentences that captures the essence and any required actions."""


CHAT_SYSTEM_PROMPT = (
    "You are Dexter, an expert email management AI assistant. You help users manage "
    "their emails efficiently, categorize messages, generate replies, and provide "
    "insights about their communication patterns."
)

CHAT_HISTORY_LIMIT = 10

CHAT_SUGGESTIONS = (
    "Show me urgent emails",
    "Categorize my recent emails",
    "Generate reply templates",
    "Summarize today's emails",
)

CHAT_FALLBACK = "I'm having trouble processing your request right now. Please try again later."


class AssistantUnavailableError(RuntimeError):
    """Raised when no AI provider is configured."""


def load_openai_api_key(secrets_dir: Path = SECRETS_DIR) -> str | None:
    env_key = os.getenv("OPENAI_API_KEY", "").strip()
    if env_key:
        return env_key

    txt_path = secrets_dir / "openai_token.txt"
    if txt_path.exists():
        try:
            token = txt_path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError:
            return None
        return token or None

    json_path = secrets_dir / "openai_token.json"
    if json_path.exists():
        try:
            payload = json.loads(json_path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        # Prefer explicit key names, then generic token key.
        candidates = [
            payload.get("api_key"),
            payload.get("openai_api_key"),
            payload.get("token"),
        ]
        for candidate in candidates:
            if isinstance(candidate, str):
                token = candidate.strip()
                if token:
                    return token
        return None

    return None


def get_openai_client() -> Optional[OpenAI]:
    api_key = load_openai_api_key()
    if not api_key:
        return None
    return OpenAI(api_key=api_key)


def _complete(client: Optional[OpenAI], prompt: str, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> str:
    if client is None:
        raise AssistantUnavailableError(
            "No AI API keys configured. Please set OPENAI_API_KEY"
        )
    resp = client.responses.create(
        model=OPENAI_MODEL,
        input=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ],
        temperature=0.1,
        max_output_tokens=1000,
    )
    return (resp.output_text or "").strip()


def generate_reply(
    client: Optional[OpenAI],
    *,
    sender: str,
    subject: str,
    original_content: str,
    user_context: str = "Professional business context",
) -> str:
    prompt = EMAIL_REPLY_PROMPT.format(
        sender=sender,
        subject=subject,
        original_content=original_content[:REPLY_CONTENT_LIMIT],
        user_context=user_context,
    )
    return _complete(client, prompt)


def summarize_email(client: Optional[OpenAI], *, sender: str, subject: str, content: str) -> str:
    prompt = SMART_SUMMARY_PROMPT.format(
        sender=sender,
        subject=subject,
        content=content[:SUMMARY_CONTENT_LIMIT],
    )
    return _complete(client, prompt)


def build_chat_prompt(
    message: str,
    context: Optional[Mapping[str, Any]] = None,
    conversation: Sequence[Mapping[str, Any]] = (),
) -> str:
    """Wrap the user's message with the email/thread it refers to and recent turns.

    Unknown context actions leave the message as is. Only the last
    ``CHAT_HISTORY_LIMIT`` turns are replayed.
    """
    prompt = message
    action = (context or {}).get("action")
    if action == "generateReply":
        prompt = (
            "Generate a professional reply to this email:\n"
            f"From: {context.get('sender')}\n"
            f"Subject: {context.get('subject')}\n"
            f"Content: {context.get('content')}\n\n"
            f"User's message: {message}"
        )
    elif action == "summarize":
        prompt = (
            "Summarize this email:\n"
            f"From: {context.get('sender')}\n"
            f"Subject: {context.get('subject')}\n"
            f"Content: {context.get('content')}\n\n"
            f"User's question: {message}"
        )
    elif action == "smartReply":
        prompt = (
            "Generate quick reply options for this conversation:\n"
            f"Platform: {context.get('platform')}\n"
            f"Last message: {context.get('lastMessage')}\n\n"
            f"User's input: {message}"
        )
    elif action == "summarizeChat":
        prompt = (
            "Analyze this conversation thread:\n"
            f"Platform: {context.get('platform')}\n"
            f"Messages: {json.dumps(context.get('messages'))}\n\n"
            f"User's question: {message}"
        )

    if conversation:
        history = "\n".join(
            f"{turn.get('type')}: {turn.get('content')}"
            for turn in conversation[-CHAT_HISTORY_LIMIT:]
        )
        prompt = f"Previous conversation:\n{history}\n\nCurrent message: {prompt}"
    return prompt


def chat(
    client: Optional[OpenAI],
    *,
    message: str,
    context: Optional[Mapping[str, Any]] = None,
    conversation: Sequence[Mapping[str, Any]] = (),
) -> str:
    return _complete(client, build_chat_prompt(message, context, conversation), CHAT_SYSTEM_PROMPT)


def fallback_reply(subject: str, exc: Exception) -> str:
    """Template reply used when generation fails; contextual only if no key is configured."""
    reply = "Thank you for your email. I'll review this and get back to you soon."
    if not isinstance(exc, AssistantUnavailableError):
        return reply

    subj = (subject or "").lower()
    if "meeting" in subj:
        return (
            "Thank you for the meeting request. I'll check my calendar and get back "
            "to you with my availability."
        )
    if "urgent" in subj:
        return (
            "I've received your urgent message and will prioritize reviewing it. "
            "I'll respond as soon as possible."
        )
    if "question" in subj:
        return (
            "Thank you for your question. I'll look into this and provide you with a "
            "detailed response shortly."
        )
    return reply


def fallback_summary(sender: str, subject: str) -> str:
    return f"Email from {sender} regarding: {subject}"


def assistant_status() -> Dict[str, Any]:
    available = load_openai_api_key() is not None
    return {
        "available": available,
        "provider": "openai" if available else None,
        "capabilities": {
            "emailCategorization": False,
            "replyGeneration": True,
            "summarization": True,
            "chat": True,
        },
        "models": {"openai": OPENAI_MODEL if available else None},
        "setup": {"openai": "configured" if available else "missing OPENAI_API_KEY"},
    }
