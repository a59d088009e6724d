"""OpenAI Responses API client for food recognition."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from diet_tracker.services.coach import CoachTextClient
from diet_tracker.services.recognition import FoodTextClient
from diet_tracker.services.vision import FoodImageClient


@dataclass
class OpenAIFoodClient(FoodTextClient, FoodImageClient, CoachTextClient):
    """Food recognition and coaching client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIFoodClient":
        """Create an OpenAI food recognition client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def recognize_text(
        self,
        *,
        model: str,
        instructions: str,
        text: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        """Ask the model for nutrition of a food description."""
        return await self._create(
            {
                "model": model,
                "instructions": instructions,
                "input": text,
                "max_output_tokens": max_output_tokens,
                "store": store,
            }
        )

    async def recognize_image(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        """Ask the model to identify foods in an image."""
        return await self._create(
            {
                "model": model,
                "input": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "input_text", "text": prompt},
                            {"type": "input_image", "image_url": image_data_url},
                        ],
                    }
                ],
                "max_output_tokens": max_output_tokens,
                "store": store,
            }
        )

    async def generate_text(
        self,
        *,
        model: str,
        prompt: str,
        max_output_tokens: int,
        store: bool,
    ) -> str:
        """Ask the model for a free-form coaching reply."""
        return await self._create(
            {
                "model": model,
                "input": prompt,
                "max_output_tokens": max_output_tokens,
                "store": store,
            }
        )

    async def _create(self, request_payload: dict[str, object]) -> str:
        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
