"""Tests for the OpenAI meal recognition adapter."""

import asyncio
import json

import pytest

from meal_windows.adapters.openai_meal_client import OpenAIMealClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = json.dumps({"name": "Soup"})) -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_recognize_sends_description_with_schema() -> None:
    fake = _FakeOpenAI()
    client = OpenAIMealClient(client=fake)

    result = asyncio.run(
        client.recognize(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            prompt="Estimate",
            schema={"type": "object"},
            description="lentil soup",
        )
    )

    assert result == {"name": "Soup"}
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["store"] is False
    assert payload["text"]["format"]["name"] == "meal_recognition"
    assert payload["text"]["format"]["strict"] is True
    (message,) = payload["input"]
    assert message["content"] == [
        {"type": "input_text", "text": "Estimate"},
        {"type": "input_text", "text": "Meal: lentil soup"},
    ]


def test_recognize_attaches_image_without_reasoning() -> None:
    fake = _FakeOpenAI()
    client = OpenAIMealClient(client=fake)

    asyncio.run(
        client.recognize(
            model="gpt-5.2",
            reasoning_effort=None,
            store=True,
            prompt="Estimate",
            schema={"type": "object"},
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
        )
    )

    payload = fake.responses.last_payload
    assert payload is not None
    assert "reasoning" not in payload
    content = payload["input"][0]["content"]
    assert content[-1] == {
        "type": "input_image",
        "image_url": "data:image/jpeg;base64,ZmFrZQ==",
    }


def test_recognize_rejects_empty_output() -> None:
    client = OpenAIMealClient(client=_FakeOpenAI(output_text=""))

    with pytest.raises(RuntimeError, match="empty response"):
        asyncio.run(
            client.recognize(
                model="gpt-5.2",
                reasoning_effort=None,
                store=False,
                prompt="Estimate",
                schema={"type": "object"},
                description="toast",
            )
        )


def test_close_closes_underlying_client() -> None:
    fake = _FakeOpenAI()

    asyncio.run(OpenAIMealClient(client=fake).close())

    assert fake.closed
