"""OpenAI Responses API client for meal recognition."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from meal_windows.services.recognition import MealRecognitionClient


@dataclass
class OpenAIMealClient(MealRecognitionClient):
    """Meal recognition client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIMealClient":
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def recognize(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
        description: str | None = None,
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        content: list[dict[str, str]] = [{"type": "input_text", "text": prompt}]
        if description:
            content.append({"type": "input_text", "text": f"Meal: {description}"})
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})

        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "meal_recognition",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        await self.client.close()
