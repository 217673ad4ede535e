# quiz/session.py
"""
Quiz-taking state machine.

A session walks through a fixed list of validated questions one at a time.
Each question is either answered or skipped; after every action the next
question is the first unanswered one after the current position, wrapping
around to the start to revisit skipped questions. Once no unanswered slot is
left the session is completed and can be scored.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, List, Optional

from pydantic import ValidationError

from core.exceptions import (
    InputValidationError,
    InvalidAnswerError,
    NoActiveQuizError,
    QuizSessionError,
)

from .schemas import GRADED_TYPES, dump_question, parse_question

logger = logging.getLogger(__name__)

SESSION_KEY = 'quiz_session'


@dataclass
class QuestionResult:
    index: int
    type: str
    question: str
    explanation: str
    user_answer: Any
    user_answer_text: Optional[str]
    correct_answer: Any
    correct_answer_text: str
    is_correct: Optional[bool]


@dataclass
class ScoreReport:
    correct_count: int
    graded_count: int
    results: List[QuestionResult] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        if not self.graded_count:
            return 0.0
        return round(self.correct_count / self.graded_count * 100, 2)

    @property
    def score_display(self) -> str:
        return f"{self.correct_count} / {self.graded_count}"

    def to_dict(self) -> dict:
        return {
            'correct': self.correct_count,
            'graded': self.graded_count,
            'percentage': self.percentage,
            'score_display': self.score_display,
            'results': [asdict(r) for r in self.results],
        }


def _bool_label(value: bool) -> str:
    return 'True' if value else 'False'


class QuizSession:
    def __init__(self, questions: List[dict], current_index: int = 0, answers: Optional[List[Any]] = None):
        self.questions = list(questions)
        self.answers = list(answers) if answers is not None else [None] * len(self.questions)
        if len(self.answers) != len(self.questions):
            raise ValueError("answers must have one slot per question")
        self.current_index = current_index

    @classmethod
    def start(cls, questions: List[dict]) -> 'QuizSession':
        """Create a fresh session: every question re-validated, all unanswered, pointer at 0."""
        validated = []
        for idx, record in enumerate(questions):
            try:
                validated.append(dump_question(parse_question(record)))
            except ValidationError as e:
                raise InputValidationError(f"Question {idx + 1} is not a valid question.") from e
        logger.info("Quiz session started with %d questions", len(validated))
        return cls(validated)

    # -----------------------------
    # State
    # -----------------------------
    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    @property
    def is_completed(self) -> bool:
        return all(a is not None for a in self.answers)

    @property
    def current_question(self) -> Optional[dict]:
        if self.is_completed:
            return None
        return self.questions[self.current_index]

    def find_next_unanswered(self, start: int) -> Optional[int]:
        """First unanswered index at or after start, else the first one from 0, else None."""
        for idx in range(start, self.total):
            if self.answers[idx] is None:
                return idx
        for idx in range(self.total):
            if self.answers[idx] is None:
                return idx
        return None

    # -----------------------------
    # Transitions
    # -----------------------------
    def submit_answer(self, raw_answer) -> None:
        question = self._require_active()
        self.answers[self.current_index] = self._coerce_answer(question, raw_answer)
        logger.debug("Answer to question %d saved: %r", self.current_index, self.answers[self.current_index])
        self._advance()

    def skip(self) -> None:
        self._require_active()
        logger.debug("Question %d skipped", self.current_index)
        self._advance()

    def _require_active(self) -> dict:
        question = self.current_question
        if question is None:
            raise QuizSessionError("The quiz is already completed.")
        return question

    def _advance(self) -> None:
        next_index = self.find_next_unanswered(self.current_index + 1)
        if next_index is None:
            logger.info("Quiz completed, all %d questions answered", self.total)
            return
        self.current_index = next_index

    @staticmethod
    def _coerce_answer(question: dict, raw):
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise InvalidAnswerError('Please give an answer or press "Skip".')

        qtype = question['type']
        if qtype == 'multiple_choice':
            if isinstance(raw, bool):
                raise InvalidAnswerError("Choose one of the options.")
            try:
                index = raw if isinstance(raw, int) else int(str(raw).strip())
            except ValueError:
                raise InvalidAnswerError("Choose one of the options.") from None
            if not 0 <= index < len(question['options']):
                raise InvalidAnswerError("Choose one of the options.")
            return index

        if qtype == 'true_false':
            if isinstance(raw, bool):
                return raw
            if isinstance(raw, str) and raw.strip().lower() in ('true', 'false'):
                return raw.strip().lower() == 'true'
            raise InvalidAnswerError('Answer "true" or "false".')

        if not isinstance(raw, str):
            raise InvalidAnswerError("Type your answer as text.")
        return raw.strip()

    # -----------------------------
    # Scoring
    # -----------------------------
    def score(self) -> ScoreReport:
        if not self.is_completed:
            raise QuizSessionError("Answer every question before viewing results.")

        report = ScoreReport(correct_count=0, graded_count=0)
        for idx, (question, answer) in enumerate(zip(self.questions, self.answers)):
            qtype = question['type']
            if qtype == 'multiple_choice':
                correct = question['correctAnswerIndex']
                is_correct = answer == correct
                user_text = question['options'][answer]
                correct_text = question['options'][correct]
            elif qtype == 'true_false':
                correct = question['correctAnswer']
                is_correct = answer == correct
                user_text = _bool_label(answer)
                correct_text = _bool_label(correct)
            else:
                correct = question['idealAnswer']
                is_correct = None
                user_text = answer or None
                correct_text = correct

            if qtype in GRADED_TYPES:
                report.graded_count += 1
                if is_correct:
                    report.correct_count += 1

            report.results.append(QuestionResult(
                index=idx,
                type=qtype,
                question=question['question'],
                explanation=question['explanation'],
                user_answer=answer,
                user_answer_text=user_text,
                correct_answer=correct,
                correct_answer_text=correct_text,
                is_correct=is_correct,
            ))
        return report

    # -----------------------------
    # Views and storage
    # -----------------------------
    def public_state(self) -> dict:
        """Progress for the client. The active question is sent without its answer fields."""
        state = {
            'completed': self.is_completed,
            'total': self.total,
            'answered': self.answered_count,
            'current_index': None,
            'question': None,
        }
        question = self.current_question
        if question is not None:
            visible = {k: question[k] for k in ('type', 'question') if k in question}
            if question['type'] == 'multiple_choice':
                visible['options'] = list(question['options'])
            state['current_index'] = self.current_index
            state['question_number'] = self.current_index + 1
            state['is_last'] = self.current_index == self.total - 1
            state['question'] = visible
        return state

    def to_dict(self) -> dict:
        return {
            'questions': self.questions,
            'current_index': self.current_index,
            'answers': self.answers,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'QuizSession':
        return cls(data['questions'], data.get('current_index', 0), data.get('answers'))


def load_session(store) -> QuizSession:
    """Return the quiz held in a Django session store, or raise NoActiveQuizError."""
    data = store.get(SESSION_KEY)
    if not data:
        raise NoActiveQuizError()
    return QuizSession.from_dict(data)


def save_session(store, quiz: QuizSession) -> None:
    store[SESSION_KEY] = quiz.to_dict()


def discard_session(store) -> None:
    """Restart: drop questions, pointer and answers, back to the pre-session state."""
    if SESSION_KEY in store:
        del store[SESSION_KEY]
        logger.info("Quiz session discarded")
