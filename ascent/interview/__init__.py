"""Interview module -- simulated oral interviews against a language model.

Public API:
    InterviewSession   - Stateful exchange engine for one topic
    GeminiClient       - Model endpoint client
    ConversationHistory - Append-only turn log
    compose            - Interviewer system prompt for a topic

Schemas:
    Topic, Turn, Role, SessionState
"""

from ascent.interview.gemini import GENERATION_CONFIG, GeminiClient
from ascent.interview.history import ConversationHistory
from ascent.interview.prompts import compose
from ascent.interview.schemas import Role, SessionState, Topic, Turn
from ascent.interview.session import DEFAULT_OPENING, InterviewSession

__all__ = [
    "ConversationHistory",
    "DEFAULT_OPENING",
    "GENERATION_CONFIG",
    "GeminiClient",
    "InterviewSession",
    "Role",
    "SessionState",
    "Topic",
    "Turn",
    "compose",
]
