"""Interview session engine.

One InterviewSession per practice conversation. It owns the topic's
system prompt, the conversation history and the idle/awaiting_response
state. Exchanges that fail are recorded as assistant turns carrying the
error description, so the transcript always advances. A caller that stops
waiting only discards the result: the request still completes, the turns
are still recorded and the session stays awaiting_response until then.

State machine:
    idle --start()/send_turn()--> awaiting_response --(reply|error)--> idle
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID, uuid4

from ascent.errors import (
    EmptyMessageError,
    ExchangeError,
    SessionAlreadyStartedError,
    SessionBusyError,
)
from ascent.interview.gemini import GeminiClient
from ascent.interview.history import ConversationHistory
from ascent.interview.prompts import compose
from ascent.interview.schemas import Role, SessionState, Topic, Turn

logger = logging.getLogger(__name__)

DEFAULT_OPENING = "I'm ready to discuss my design for {title}."


class InterviewSession:
    """Stateful request/response cycle for one topic."""

    def __init__(
        self,
        topic: Topic,
        client: GeminiClient,
        *,
        opening_template: str = DEFAULT_OPENING,
        session_id: UUID | None = None,
    ) -> None:
        self.id = session_id or uuid4()
        self.topic = topic
        self._client = client
        self._opening_template = opening_template
        self._system_prompt = compose(topic)
        self._history = ConversationHistory()
        self._state = SessionState.IDLE
        self._pending: asyncio.Future[Turn] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state is SessionState.AWAITING_RESPONSE

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def opening_message(self) -> str:
        return self._opening_template.format(title=self.topic.title)

    async def start(self) -> Turn:
        """Open the interview with the synthetic opening user turn.

        Sent with an empty history. On failure only the error turn is
        recorded.
        """
        if self.is_busy:
            raise SessionBusyError()
        if len(self._history):
            raise SessionAlreadyStartedError()

        logger.debug("Starting interview session %s (%s)", self.id, self.topic.title)
        opening = Turn(role=Role.USER, content=self.opening_message())
        return await self._exchange(opening, record_user_on_error=False)

    async def send_turn(self, text: str) -> Turn:
        """Send a user message and return the interviewer's reply turn.

        Raises EmptyMessageError for blank text and SessionBusyError while
        a previous exchange is in flight; neither touches the history.
        Exchange failures do not raise: the returned turn carries the
        error description instead.
        """
        text = text.strip()
        if not text:
            raise EmptyMessageError()
        if self.is_busy:
            raise SessionBusyError()

        return await self._exchange(Turn(role=Role.USER, content=text))

    async def _exchange(self, user_turn: Turn, *, record_user_on_error: bool = True) -> Turn:
        # Prior context is the committed history, without this user turn
        prior = self._history.snapshot()

        self._state = SessionState.AWAITING_RESPONSE
        # Abandoning the await does not cancel the request: the exchange
        # still completes and is recorded.
        self._pending = asyncio.ensure_future(
            self._complete(user_turn, prior, record_user_on_error)
        )
        return await asyncio.shield(self._pending)

    async def _complete(
        self,
        user_turn: Turn,
        prior: tuple[Turn, ...],
        record_user_on_error: bool,
    ) -> Turn:
        try:
            reply_text = await self._client.send_message(
                user_turn.content,
                prior,
                self._system_prompt,
            )
        except ExchangeError as e:
            reply = Turn(role=Role.ASSISTANT, content=f"Error: {e.description}")
            if record_user_on_error:
                self._history.extend(user_turn, reply)
            else:
                self._history.extend(reply)
            return reply
        finally:
            self._state = SessionState.IDLE
            self._pending = None

        reply = Turn(role=Role.ASSISTANT, content=reply_text)
        self._history.extend(user_turn, reply)
        return reply
