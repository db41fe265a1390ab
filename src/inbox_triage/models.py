from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from inbox_triage.categories import Category


@dataclass(frozen=True)
class EmailMetadata:
    # Every field is optional; absence means "unknown", never False.
    to_recipients: List[str] = field(default_factory=list)
    cc_recipients: List[str] = field(default_factory=list)
    is_reply: Optional[bool] = None
    is_forward: Optional[bool] = None
    conversation_id: Optional[str] = None
    thread_id: Optional[str] = None
    in_reply_to: Optional[str] = None
    references: List[str] = field(default_factory=list)
    importance: Optional[str] = None
    platform: Optional[str] = None
    sent_by_me: Optional[bool] = None
    sent_to_me: Optional[bool] = None
    has_reply: Optional[bool] = None
    original_sent_by_me: Optional[bool] = None
    user_address: Optional[str] = None
    sent_date_time: Optional[datetime] = None
    received_date_time: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["EmailMetadata"]:
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ValueError("metadata must be an object")

        def get(camel: str, snake: str) -> Any:
            # camelCase is the wire format; snake_case is accepted for Python callers.
            if camel in data:
                return data.get(camel)
            return data.get(snake)

        return cls(
            to_recipients=_str_list(get("toRecipients", "to_recipients") or get("recipients", "to")),
            cc_recipients=_str_list(get("ccRecipients", "cc_recipients")),
            is_reply=_opt_bool(get("isReply", "is_reply")),
            is_forward=_opt_bool(get("isForward", "is_forward")),
            conversation_id=_opt_str(get("conversationId", "conversation_id")),
            thread_id=_opt_str(get("threadId", "thread_id")),
            in_reply_to=_opt_str(get("inReplyTo", "in_reply_to")),
            references=_str_list(get("references", "references")),
            importance=_opt_str(get("importance", "importance")),
            platform=_opt_str(get("platform", "platform")),
            sent_by_me=_opt_bool(get("sentByMe", "sent_by_me")),
            sent_to_me=_opt_bool(get("sentToMe", "sent_to_me")),
            has_reply=_opt_bool(get("hasReply", "has_reply")),
            original_sent_by_me=_opt_bool(get("originalSentByMe", "original_sent_by_me")),
            user_address=_opt_str(get("userAddress", "user_address")),
            sent_date_time=parse_datetime(get("sentDateTime", "sent_date_time")),
            received_date_time=parse_datetime(
                get("receivedDateTime", "received_date_time") or get("timestamp", "timestamp")
            ),
        )

    def is_direct_recipient(self) -> bool:
        """True if the mail was sent to the user and the user is not only on CC."""
        if not self.sent_to_me:
            return False
        me = (self.user_address or "").strip().lower()
        if not me:
            return True
        to = {addr.lower() for addr in self.to_recipients}
        cc = {addr.lower() for addr in self.cc_recipients}
        if me in to:
            return True
        return me not in cc


@dataclass(frozen=True)
class Email:
    sender: str
    subject: str
    content: str = ""
    id: Optional[str] = None
    metadata: Optional[EmailMetadata] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Email":
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected an email object, got {type(data).__name__}")
        raw_id = data.get("id")
        return cls(
            sender=str(data.get("sender") or ""),
            subject=str(data.get("subject") or ""),
            content=str(data.get("content") or ""),
            id=None if raw_id is None else str(raw_id),
            metadata=EmailMetadata.from_dict(data.get("metadata")),
        )

    @property
    def sender_domain(self) -> str:
        parts = self.sender.split("@")
        return parts[1] if len(parts) > 1 else ""


@dataclass(frozen=True)
class CategorizationResult:
    category: Category
    confidence: float
    reason: str
    suggested_actions: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "category": self.category.value,
            "confidence": self.confidence,
            "reason": self.reason,
        }
        if self.suggested_actions is not None:
            payload["suggestedActions"] = list(self.suggested_actions)
        return payload


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO-8601 strings or epoch milliseconds; anything else yields None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _opt_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _str_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.replace(",", " ").split() if part.strip()]
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Expected a list of addresses, got {type(value).__name__}")
    items: List[str] = []
    for item in value:
        # Accept {"name": ..., "address": ...} recipient objects as well as plain strings.
        if isinstance(item, Mapping):
            address = item.get("address") or item.get("email")
            if address:
                items.append(str(address).strip())
        elif item:
            items.append(str(item).strip())
    return items
