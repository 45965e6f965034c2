"""Pydantic models for interview sessions.

Domain types (Topic, Turn, Role, SessionState) plus the wire schemas of
the Gemini generateContent endpoint.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from ascent.transport import ServiceEnvelope


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionState(StrEnum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class Topic(BaseModel):
    """One practice scenario, supplied by the content store."""

    model_config = ConfigDict(frozen=True)

    title: str
    requirements: str = ""
    strategy: str = ""
    twist: str = ""


class Turn(BaseModel):
    """One message in the conversation. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


# ---------------------------------------------------------------------------
# Wire vocabulary
# ---------------------------------------------------------------------------

_WIRE_ROLES = {Role.USER: "user", Role.ASSISTANT: "model"}
_ROLES_FROM_WIRE = {wire: role for role, wire in _WIRE_ROLES.items()}


def to_wire_role(role: Role) -> str:
    return _WIRE_ROLES[role]


def from_wire_role(wire_role: str) -> Role:
    """Map a wire role back. Raises ValueError on an unknown role."""
    try:
        return _ROLES_FROM_WIRE[wire_role]
    except KeyError:
        raise ValueError(f"Unknown wire role: {wire_role!r}") from None


# ---------------------------------------------------------------------------
# generateContent request
# ---------------------------------------------------------------------------


class Part(BaseModel):
    text: str


class Content(BaseModel):
    role: str
    parts: list[Part]


class GenerationConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    temperature: float
    max_output_tokens: int = Field(alias="maxOutputTokens")
    top_p: float = Field(alias="topP")


class SystemInstruction(BaseModel):
    parts: list[Part]


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contents: list[Content]
    generation_config: GenerationConfig | None = Field(None, alias="generationConfig")
    system_instruction: SystemInstruction | None = Field(None, alias="systemInstruction")

    def to_payload(self) -> dict:
        """JSON body with the endpoint's camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# generateContent response
# ---------------------------------------------------------------------------


class ResponsePart(BaseModel):
    text: str | None = None


class ResponseContent(BaseModel):
    parts: list[ResponsePart] | None = None
    role: str | None = None


class Candidate(BaseModel):
    content: ResponseContent | None = None


class GenerateResponse(ServiceEnvelope):
    candidates: list[Candidate] | None = None

    def first_text(self) -> str | None:
        """Text of the first part of the first candidate, if present."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text
