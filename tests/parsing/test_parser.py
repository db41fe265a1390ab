from __future__ import annotations

import base64

import pytest

from inbox_triage.parsing.parser import (
    email_from_gmail_message,
    email_from_graph_message,
    email_to_dict,
    extract_body_from_payload,
)
from inbox_triage.models import Email, EmailMetadata


def _b64(text: str) -> str:
    # Gmail returns unpadded base64url.
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def _gmail_message(**overrides):
    message = {
        "id": "g-1",
        "threadId": "t-1",
        "labelIds": ["INBOX", "UNREAD"],
        "snippet": "snippet text",
        "internalDate": "1767225600000",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [
                {"name": "From", "value": "Alice Example <alice@example.com>"},
                {"name": "To", "value": "Me <me@corp.com>, team@corp.com"},
                {"name": "Cc", "value": "boss@corp.com"},
                {"name": "Subject", "value": "Re: Roadmap"},
                {"name": "In-Reply-To", "value": "<orig@corp.com>"},
                {"name": "References", "value": "<a@corp.com> <orig@corp.com>"},
                {"name": "X-Priority", "value": "1 (Highest)"},
            ],
            "parts": [
                {"mimeType": "text/html", "body": {"data": _b64("<p>html body</p>")}},
                {"mimeType": "text/plain", "body": {"data": _b64("plain body ok")}},
            ],
        },
    }
    message.update(overrides)
    return message


def test_extract_body_prefers_plain_text_and_handles_missing_padding() -> None:
    payload = _gmail_message()["payload"]

    assert extract_body_from_payload(payload) == "plain body ok"


def test_extract_body_falls_back_to_html() -> None:
    payload = {"parts": [{"mimeType": "text/html", "body": {"data": _b64("<b>hi</b>")}}]}

    assert extract_body_from_payload(payload) == "<b>hi</b>"
    assert extract_body_from_payload({}) == ""


def test_gmail_message_is_normalized_with_metadata() -> None:
    email = email_from_gmail_message(_gmail_message(), user_address="me@corp.com")
    meta = email.metadata

    assert email.id == "g-1"
    assert email.sender == "alice@example.com"
    assert email.subject == "Re: Roadmap"
    assert email.content == "plain body ok"
    assert meta.to_recipients == ["me@corp.com", "team@corp.com"]
    assert meta.cc_recipients == ["boss@corp.com"]
    assert meta.is_reply is True
    assert meta.in_reply_to == "<orig@corp.com>"
    assert meta.references == ["<a@corp.com>", "<orig@corp.com>"]
    assert meta.importance == "high"
    assert meta.thread_id == "t-1"
    assert meta.platform == "gmail"
    assert meta.sent_by_me is False
    assert meta.sent_to_me is True
    assert meta.sent_date_time is None
    assert meta.received_date_time.year == 2026


def test_gmail_sent_label_marks_own_message() -> None:
    email = email_from_gmail_message(_gmail_message(labelIds=["SENT"]), user_address="other@corp.com")

    assert email.metadata.sent_by_me is True
    assert email.metadata.sent_date_time == email.metadata.received_date_time
    assert email.metadata.sent_to_me is False


def test_graph_message_is_normalized() -> None:
    message = {
        "id": "o-1",
        "conversationId": "conv-9",
        "subject": "FW: Contract",
        "importance": "high",
        "sender": {"emailAddress": {"name": "Bob", "address": "bob@partner.com"}},
        "toRecipients": [{"emailAddress": {"address": "me@corp.com"}}],
        "ccRecipients": [],
        "body": {"content": "see attached"},
        "receivedDateTime": "2026-01-05T09:30:00Z",
    }

    email = email_from_graph_message(message, user_address="me@corp.com")

    assert email.sender == "bob@partner.com"
    assert email.content == "see attached"
    assert email.metadata.conversation_id == "conv-9"
    assert email.metadata.is_forward is True
    assert email.metadata.is_direct_recipient() is True
    assert email.metadata.received_date_time.hour == 9


def test_email_to_dict_round_trips_through_from_dict() -> None:
    email = email_from_gmail_message(_gmail_message(), user_address="me@corp.com")

    restored = Email.from_dict(email_to_dict(email))

    assert restored == email


def test_metadata_accepts_comma_separated_recipients() -> None:
    metadata = EmailMetadata.from_dict({"toRecipients": "a@x.com, b@x.com"})

    assert metadata.to_recipients == ["a@x.com", "b@x.com"]


@pytest.mark.parametrize("value", [5, True, {"address": "a@x.com"}])
def test_metadata_rejects_non_list_recipients(value) -> None:
    with pytest.raises(ValueError):
        EmailMetadata.from_dict({"toRecipients": value})
