# quiznova/quiz_manager.py
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from quiznova.client import GenerationFailed, QuizServiceClient
from quiznova.schemas import MAX_QUESTIONS, MIN_QUESTIONS, QuizQuestion

logger = logging.getLogger(__name__)

DEFAULT_TIMER_SECONDS = 10
INVALID_CONFIG_MESSAGE = "Please enter a valid topic, number of questions, and timer duration."


class SessionState(str, Enum):
    CONFIGURING = "configuring"
    ACTIVE = "active"
    COMPLETED = "completed"


class SessionError(Exception):
    """An action was attempted that the session's current state does not allow."""


@dataclass
class UserAnswer:
    question_index: int
    answer: str


@dataclass
class QuestionResult:
    index: int
    text: str
    answer: Optional[str]
    correct_answer: str
    is_correct: bool


class QuizSession:
    """
    Client-side state for one player working through one quiz.

    CONFIGURING -> ACTIVE once generation succeeds, ACTIVE -> COMPLETED after
    the last question, COMPLETED -> CONFIGURING on retake(). While ACTIVE a
    single countdown task runs for the current question; it is owned here and
    canceled on every transition. Must be driven from inside a running event
    loop.
    """

    def __init__(self, tick_seconds: float = 1.0, on_change: Optional[Callable[["QuizSession"], None]] = None):
        self.tick_seconds = tick_seconds
        self.on_change = on_change

        self.topic = ""
        self.count = 5
        self.timer_seconds = DEFAULT_TIMER_SECONDS
        self.difficulty: Optional[str] = None

        self.state = SessionState.CONFIGURING
        self.error: Optional[str] = None
        self.loading = False
        self._timer_task: Optional[asyncio.Task] = None
        self._reset_progress()

    def _reset_progress(self) -> None:
        self.questions: List[QuizQuestion] = []
        self.current_index = 0
        self.score = 0
        self.selected: Optional[str] = None
        self.answers: Dict[int, UserAnswer] = {}
        self.remaining = 0

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def _require(self, state: SessionState) -> None:
        if self.state is not state:
            raise SessionError(f"Session is {self.state.value}, expected {state.value}")

    # -- configuration -------------------------------------------------------

    def configure(self, topic: str, count: int, timer_seconds: int = DEFAULT_TIMER_SECONDS,
                  difficulty: Optional[str] = None) -> None:
        self._require(SessionState.CONFIGURING)
        topic = (topic or "").strip()
        if not topic or not MIN_QUESTIONS <= count <= MAX_QUESTIONS or timer_seconds <= 0:
            self.error = INVALID_CONFIG_MESSAGE
            raise SessionError(INVALID_CONFIG_MESSAGE)
        self.topic = topic
        self.count = count
        self.timer_seconds = timer_seconds
        self.difficulty = difficulty
        self.error = None

    async def start(self, client: QuizServiceClient) -> bool:
        """Generate questions and begin the quiz. Returns False (with ``error`` set) on failure."""
        self._require(SessionState.CONFIGURING)
        if not self.topic:
            self.error = INVALID_CONFIG_MESSAGE
            return False

        self.error = None
        self.loading = True
        self._changed()
        try:
            questions = await client.generate_quiz(self.topic, self.count, self.difficulty)
        except GenerationFailed as e:
            logger.warning("Could not start quiz on %r: %s", self.topic, e.message)
            self.error = e.message
            self.loading = False
            self._changed()
            return False
        finally:
            self.loading = False

        self._reset_progress()
        self.questions = questions
        self.state = SessionState.ACTIVE
        logger.info("Quiz started: %d questions on %r", len(questions), self.topic)
        self._restart_timer()
        self._changed()
        return True

    # -- playing -------------------------------------------------------------

    @property
    def current_question(self) -> QuizQuestion:
        self._require(SessionState.ACTIVE)
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 == len(self.questions)

    def select(self, option: str) -> None:
        question = self.current_question
        if option not in question.options:
            raise SessionError(f"{option!r} is not an option for question {self.current_index + 1}")
        self.selected = option
        self.answers[self.current_index] = UserAnswer(self.current_index, option)
        self._changed()

    def next(self) -> None:
        self._require(SessionState.ACTIVE)
        if self.selected is None:
            raise SessionError("Select an option before moving on")
        self._advance(timed_out=False)

    def _advance(self, timed_out: bool) -> None:
        question = self.questions[self.current_index]
        if timed_out:
            # A timed-out question counts as unanswered
            self.answers.pop(self.current_index, None)
        elif self.selected == question.correct_answer:
            self.score += 1

        self.selected = None
        if self.is_last_question:
            self._cancel_timer()
            self.remaining = 0
            self.state = SessionState.COMPLETED
            logger.info("Quiz completed: %d/%d", self.score, len(self.questions))
        else:
            self.current_index += 1
            self._restart_timer()
        self._changed()

    # -- countdown -----------------------------------------------------------

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self.remaining = self.timer_seconds
        self._timer_task = asyncio.get_running_loop().create_task(self._countdown(self.current_index))

    def _cancel_timer(self) -> None:
        task, self._timer_task = self._timer_task, None
        if task is None or task.done():
            return
        try:
            running = asyncio.current_task()
        except RuntimeError:
            running = None
        # The countdown itself triggers the advance that lands here
        if task is not running:
            task.cancel()

    async def _countdown(self, index: int) -> None:
        while self.remaining > 0:
            await asyncio.sleep(self.tick_seconds)
            self.remaining -= 1
        if self.state is SessionState.ACTIVE and self.current_index == index:
            logger.info("Time expired on question %d", index + 1)
            self._advance(timed_out=True)

    # -- results -------------------------------------------------------------

    def results(self) -> List[QuestionResult]:
        self._require(SessionState.COMPLETED)
        out = []
        for i, q in enumerate(self.questions):
            ua = self.answers.get(i)
            answer = ua.answer if ua else None
            out.append(QuestionResult(
                index=i,
                text=q.text,
                answer=answer,
                correct_answer=q.correct_answer,
                is_correct=answer == q.correct_answer,
            ))
        return out

    def retake(self) -> None:
        self._require(SessionState.COMPLETED)
        self.close()

    def close(self) -> None:
        """Drop the quiz in any state and go back to configuring."""
        self._cancel_timer()
        self._reset_progress()
        self.state = SessionState.CONFIGURING
        self.error = None
        self._changed()
