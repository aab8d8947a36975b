"""Tests for HTTP-based adapters."""

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from sms_food_logger.adapters.ai_chat_client import HttpxAIChatClient
from sms_food_logger.adapters.openai_chat_client import OpenAIChatClient
from sms_food_logger.adapters.twilio_client import HttpxTwilioClient
from sms_food_logger.domain.conversations import ChatMessage


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = "Apple: 95 cal. Reply Y") -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_chat_client_sends_instructions_and_history() -> None:
    fake = _FakeOpenAI()
    client = OpenAIChatClient(client=fake, model="gpt-4o-mini")  # type: ignore[arg-type]

    reply = asyncio.run(
        client.complete(
            message="an apple",
            history=[ChatMessage(role="assistant", content="What did you eat?")],
            system_prompt="rules",
            context={},
        )
    )

    assert reply == "Apple: 95 cal. Reply Y"
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["instructions"] == "rules"
    assert payload["input"] == [
        {"role": "assistant", "content": "What did you eat?"},
        {"role": "user", "content": "an apple"},
    ]


def test_openai_chat_client_rejects_empty_output() -> None:
    client = OpenAIChatClient(client=_FakeOpenAI(""), model="gpt-4o-mini")  # type: ignore[arg-type]

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.complete(message="apple", history=[], system_prompt="", context={})
        )


def test_ai_chat_client_posts_relay_payload() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["payload"] = json.loads(request.content.decode())
        return httpx.Response(200, json={"response": "Banana: 105 cal. Reply Y"})

    transport = httpx.MockTransport(handler)
    client = HttpxAIChatClient(
        base_url="http://ai.test", http_client=httpx.AsyncClient(transport=transport)
    )

    reply = asyncio.run(
        client.complete(
            message="had a banana",
            history=[ChatMessage(role="user", content="hi")],
            system_prompt="rules",
            context={"source": "sms", "phone": "+15555550123"},
        )
    )

    assert reply == "Banana: 105 cal. Reply Y"
    assert seen["path"] == "/api/ai/chat"
    payload = seen["payload"]
    assert isinstance(payload, dict)
    assert payload["message"] == "had a banana"
    assert payload["conversationHistory"] == [{"role": "user", "content": "hi"}]
    assert payload["context"] == {
        "source": "sms",
        "phone": "+15555550123",
        "systemPrompt": "rules",
    }


def test_ai_chat_client_falls_back_to_message_field() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "What size coffee?"})

    client = HttpxAIChatClient(
        base_url="http://ai.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    reply = asyncio.run(
        client.complete(message="coffee", history=[], system_prompt="", context={})
    )

    assert reply == "What size coffee?"


def test_ai_chat_client_raises_on_missing_reply() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "ok"})

    client = HttpxAIChatClient(
        base_url="http://ai.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.complete(message="coffee", history=[], system_prompt="", context={})
        )


def test_ai_chat_client_raises_on_server_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "busy"})

    client = HttpxAIChatClient(
        base_url="http://ai.test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(
            client.complete(message="coffee", history=[], system_prompt="", context={})
        )


def test_twilio_client_posts_message_form() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM123"})

    client = HttpxTwilioClient(
        account_sid="AC123",
        auth_token="token",
        from_number="+15550001111",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    asyncio.run(client.send_message(to="+15555550123", body="Logged: Apple (95 cal)"))

    assert seen["path"] == "/2010-04-01/Accounts/AC123/Messages.json"
    assert str(seen["auth"]).startswith("Basic ")
    assert seen["form"] == {
        "From": ["+15550001111"],
        "To": ["+15555550123"],
        "Body": ["Logged: Apple (95 cal)"],
    }


def test_twilio_client_raises_on_rejection() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "invalid To"})

    client = HttpxTwilioClient(
        account_sid="AC123",
        auth_token="token",
        from_number="+15550001111",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.send_message(to="bad", body="hi"))
