"""Gemini generateContent client.

Builds request payloads from conversation turns and extracts the reply
text. All network I/O goes through the shared TransportClient; the API
key travels as the ``key`` query parameter.
"""

from __future__ import annotations

from collections.abc import Sequence

from ascent.errors import ConfigurationError, EmptyResultError, TransportError
from ascent.interview.schemas import (
    Content,
    GenerateRequest,
    GenerateResponse,
    GenerationConfig,
    Part,
    SystemInstruction,
    Turn,
    to_wire_role,
)
from ascent.transport import TransportClient

# Fixed for every call, not configurable per request
GENERATION_CONFIG = GenerationConfig(temperature=0.7, max_output_tokens=500, top_p=0.9)


class GeminiClient:
    """Sends one conversation exchange to the model endpoint."""

    def __init__(self, transport: TransportClient, *, api_key: str, base_url: str) -> None:
        missing = []
        if not base_url:
            missing.append("GEMINI_BASE_URL")
        if not api_key:
            missing.append("GEMINI_API_KEY")
        if missing:
            raise ConfigurationError(missing)
        self._transport = transport
        self._api_key = api_key
        self._base_url = base_url

    @staticmethod
    def build_request(
        message: str,
        history: Sequence[Turn],
        system_prompt: str,
    ) -> GenerateRequest:
        """Committed history first, then the current user message."""
        contents = [
            Content(role=to_wire_role(turn.role), parts=[Part(text=turn.content)])
            for turn in history
        ]
        contents.append(Content(role="user", parts=[Part(text=message)]))
        return GenerateRequest(
            contents=contents,
            generation_config=GENERATION_CONFIG,
            system_instruction=SystemInstruction(parts=[Part(text=system_prompt)]),
        )

    async def send_message(
        self,
        message: str,
        history: Sequence[Turn],
        system_prompt: str,
    ) -> str:
        """Send one exchange and return the model's reply text.

        Raises an ExchangeError subclass on failure. A missing reply
        becomes TransportError when the status was not 2xx, otherwise
        EmptyResultError.
        """
        request = self.build_request(message, history, system_prompt)
        response = await self._transport.execute(
            "POST",
            self._base_url,
            GenerateResponse,
            params={"key": self._api_key},
            headers={"Content-Type": "application/json"},
            payload=request.to_payload(),
        )

        text = response.body.first_text()
        if text is None:
            if not response.is_success:
                raise TransportError(response.status_code)
            raise EmptyResultError()
        return text

    async def generate(self, prompt: str, system_prompt: str = "") -> str:
        """One-shot generation without conversation history."""
        return await self.send_message(prompt, [], system_prompt)
