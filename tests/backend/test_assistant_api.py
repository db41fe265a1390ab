from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from backend.app.api import assistant as assistant_api
from backend.app.main import app
from inbox_triage.assistant.client import build_chat_prompt


class FakeResponses:
    def __init__(self, text: str) -> None:
        self.text = text
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(output_text=self.text)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_reply_uses_openai_client(client: TestClient, monkeypatch) -> None:
    fake = SimpleNamespace(responses=FakeResponses("  Thanks, see you Tuesday.  "))
    monkeypatch.setattr(assistant_api, "get_openai_client", lambda: fake)

    resp = client.post(
        "/api/ai/reply",
        json={"sender": "a@b.com", "subject": "Meeting", "originalContent": "x" * 5000},
    )

    assert resp.status_code == 200
    assert resp.json()["reply"] == "Thanks, see you Tuesday."
    prompt = fake.responses.calls[0]["input"][1]["content"]
    # Original content is truncated before it is sent.
    assert "x" * 1500 in prompt
    assert "x" * 1501 not in prompt


def test_reply_without_key_returns_contextual_fallback(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(assistant_api, "get_openai_client", lambda: None)

    resp = client.post(
        "/api/ai/reply",
        json={"sender": "a@b.com", "subject": "Meeting next week", "originalContent": "Can we meet?"},
    )

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["fallback"].startswith("Thank you for the meeting request.")


def test_reply_requires_fields(client: TestClient) -> None:
    resp = client.post("/api/ai/reply", json={"sender": "a@b.com"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: sender, subject, originalContent"}


def test_summarize_returns_summary_and_ratio(client: TestClient, monkeypatch) -> None:
    fake = SimpleNamespace(responses=FakeResponses("Short."))
    monkeypatch.setattr(assistant_api, "get_openai_client", lambda: fake)

    resp = client.post(
        "/api/ai/summarize",
        json={"sender": "a@b.com", "subject": "Report", "content": "0123456789"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"] == "Short."
    assert body["metadata"]["compressionRatio"] == "0.60"


def test_summarize_without_key_returns_fallback(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(assistant_api, "get_openai_client", lambda: None)

    resp = client.post(
        "/api/ai/summarize",
        json={"sender": "a@b.com", "subject": "Report", "content": "body"},
    )

    assert resp.status_code == 500
    assert resp.json()["fallback"] == "Email from a@b.com regarding: Report"


def test_chat_wraps_context_and_recent_history(client: TestClient, monkeypatch) -> None:
    fake = SimpleNamespace(responses=FakeResponses(" Here is a draft. "))
    monkeypatch.setattr(assistant_api, "get_openai_client", lambda: fake)
    conversation = [{"type": "user", "content": f"turn {i}"} for i in range(12)]

    resp = client.post(
        "/api/ai/chat",
        json={
            "message": "Keep it short",
            "context": {
                "action": "generateReply",
                "sender": "boss@corp.com",
                "subject": "Budget",
                "content": "Send the numbers",
            },
            "conversation": conversation,
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["content"] == "Here is a draft."
    assert body["suggestions"][0] == "Show me urgent emails"
    assert body["metadata"] == {"provider": "openai", "hasContext": True, "conversationLength": 12}

    messages = fake.responses.calls[0]["input"]
    assert messages[0]["content"].startswith("You are Dexter")
    prompt = messages[1]["content"]
    assert prompt.startswith("Previous conversation:\nuser: turn 2\n")
    assert "user: turn 1\n" not in prompt
    assert "Current message: Generate a professional reply to this email:\nFrom: boss@corp.com" in prompt
    assert prompt.endswith("User's message: Keep it short")


def test_chat_without_context_sends_message_as_is(client: TestClient, monkeypatch) -> None:
    fake = SimpleNamespace(responses=FakeResponses("Hi"))
    monkeypatch.setattr(assistant_api, "get_openai_client", lambda: fake)

    resp = client.post("/api/ai/chat", json={"message": "What is urgent today?"})

    assert resp.status_code == 200
    assert resp.json()["metadata"]["hasContext"] is False
    assert fake.responses.calls[0]["input"][1]["content"] == "What is urgent today?"


def test_chat_requires_message(client: TestClient) -> None:
    resp = client.post("/api/ai/chat", json={"context": {"action": "summarize"}})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required field: message"}


def test_chat_without_key_returns_fallback(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(assistant_api, "get_openai_client", lambda: None)

    resp = client.post("/api/ai/chat", json={"message": "hello"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "AI chat failed"
    assert body["fallback"].startswith("I'm having trouble processing your request")


def test_status_lists_chat_capability(client: TestClient, monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    resp = client.get("/api/ai/status")

    status = resp.json()["status"]
    assert status["provider"] == "openai"
    assert status["capabilities"]["chat"] is True


def test_chat_prompt_serializes_thread_messages() -> None:
    prompt = build_chat_prompt(
        "Any action items?",
        {"action": "summarizeChat", "platform": "slack", "messages": [{"text": "ship it"}]},
    )

    assert prompt == (
        "Analyze this conversation thread:\n"
        "Platform: slack\n"
        'Messages: [{"text": "ship it"}]\n\n'
        "User's question: Any action items?"
    )
