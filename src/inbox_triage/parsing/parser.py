from __future__ import annotations

import base64
from email.utils import getaddresses, parseaddr
from typing import Any, Dict, List, Mapping, Optional

from inbox_triage.models import Email, EmailMetadata, parse_datetime


def extract_body_from_payload(payload: dict) -> str:
    """
    Extract plain text body from Gmail message payload.
    Falls back to HTML if plain text is unavailable.
    """
    def decode(data: str) -> str:
        # Gmail strips base64 padding.
        padded = data + "=" * (-len(data) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")

    def find_part(part: dict, mime_type: str) -> Optional[str]:
        # Depth-first search through multipart payloads.
        if part.get("mimeType") == mime_type and part.get("body", {}).get("data"):
            return decode(part["body"]["data"])
        for child in part.get("parts", []) or []:
            found = find_part(child, mime_type)
            if found:
                return found
        return None

    if payload.get("body", {}).get("data"):
        return decode(payload["body"]["data"])

    text = find_part(payload, "text/plain")
    if text:
        return text

    html = find_part(payload, "text/html")
    if html:
        return html

    return ""


def email_from_gmail_message(message: Mapping[str, Any], user_address: Optional[str] = None) -> Email:
    """Normalize a Gmail API `users.messages.get(format=full)` resource."""
    payload = message.get("payload") or {}
    headers = {h["name"].lower(): h.get("value", "") for h in payload.get("headers", []) if "name" in h}
    label_ids = {str(x).upper() for x in (message.get("labelIds") or [])}

    subject = headers.get("subject", "")
    from_header = headers.get("from", "")
    to_recipients = _addresses(headers.get("to", ""))
    cc_recipients = _addresses(headers.get("cc", ""))
    in_reply_to = headers.get("in-reply-to") or None
    internal_date = parse_datetime(int(message["internalDate"])) if message.get("internalDate") else None
    sent_by_me = "SENT" in label_ids

    metadata = EmailMetadata(
        to_recipients=to_recipients,
        cc_recipients=cc_recipients,
        is_reply=subject.lower().startswith("re:") or bool(in_reply_to),
        is_forward=subject.lower().startswith(("fwd:", "fw:")),
        thread_id=message.get("threadId"),
        in_reply_to=in_reply_to,
        references=headers.get("references", "").split(),
        importance="high" if headers.get("x-priority", "").strip().startswith("1") else "normal",
        platform="gmail",
        sent_by_me=sent_by_me,
        sent_to_me=_sent_to_me(user_address, to_recipients, cc_recipients),
        user_address=user_address,
        sent_date_time=internal_date if sent_by_me else None,
        received_date_time=internal_date,
    )
    return Email(
        id=message.get("id"),
        sender=parseaddr(from_header)[1] or from_header,
        subject=subject or "(No Subject)",
        content=extract_body_from_payload(payload) or message.get("snippet", ""),
        metadata=metadata,
    )


def email_from_graph_message(message: Mapping[str, Any], user_address: Optional[str] = None) -> Email:
    """Normalize a Microsoft Graph `message` resource (Outlook)."""
    sender = ((message.get("sender") or message.get("from") or {}).get("emailAddress") or {})
    to_recipients = _graph_addresses(message.get("toRecipients"))
    cc_recipients = _graph_addresses(message.get("ccRecipients"))
    subject = message.get("subject") or ""
    sender_address = str(sender.get("address") or "")
    sent_by_me = bool(user_address) and sender_address.lower() == str(user_address).lower()

    metadata = EmailMetadata(
        to_recipients=to_recipients,
        cc_recipients=cc_recipients,
        is_reply=subject.startswith("Re:"),
        is_forward=subject.startswith(("Fwd:", "FW:")),
        conversation_id=message.get("conversationId"),
        importance=message.get("importance") or "normal",
        platform="outlook",
        sent_by_me=sent_by_me,
        sent_to_me=_sent_to_me(user_address, to_recipients, cc_recipients),
        user_address=user_address,
        sent_date_time=parse_datetime(message.get("sentDateTime")),
        received_date_time=parse_datetime(message.get("receivedDateTime")),
    )
    body = (message.get("body") or {}).get("content") or message.get("bodyPreview") or ""
    return Email(
        id=message.get("id"),
        sender=sender_address,
        subject=subject or "(No Subject)",
        content=body,
        metadata=metadata,
    )


PROVIDERS = {
    "gmail": email_from_gmail_message,
    "outlook": email_from_graph_message,
}


def email_to_dict(email: Email) -> Dict[str, Any]:
    """Wire representation used in batch responses."""
    payload: Dict[str, Any] = {
        "id": email.id,
        "sender": email.sender,
        "subject": email.subject,
        "content": email.content,
    }
    meta = email.metadata
    if meta is not None:
        payload["metadata"] = {
            "platform": meta.platform,
            "toRecipients": list(meta.to_recipients),
            "ccRecipients": list(meta.cc_recipients),
            "isReply": meta.is_reply,
            "isForward": meta.is_forward,
            "conversationId": meta.conversation_id,
            "threadId": meta.thread_id,
            "inReplyTo": meta.in_reply_to,
            "references": list(meta.references),
            "importance": meta.importance,
            "sentByMe": meta.sent_by_me,
            "sentToMe": meta.sent_to_me,
            "userAddress": meta.user_address,
            "sentDateTime": meta.sent_date_time.isoformat() if meta.sent_date_time else None,
            "receivedDateTime": meta.received_date_time.isoformat() if meta.received_date_time else None,
        }
    return payload


def _sent_to_me(user_address: Optional[str], to: List[str], cc: List[str]) -> bool:
    if not user_address:
        return True
    me = user_address.strip().lower()
    return me in {a.lower() for a in to} or me in {a.lower() for a in cc}


def _addresses(header_value: str) -> List[str]:
    return [addr for _name, addr in getaddresses([header_value]) if addr]


def _graph_addresses(recipients: Any) -> List[str]:
    out: List[str] = []
    for recipient in recipients or []:
        address = (recipient.get("emailAddress") or {}).get("address")
        if address:
            out.append(address)
    return out
