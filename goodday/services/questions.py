"""
Question catalog: the fixed Good Day survey.

Option order is the ordinal scale used everywhere downstream (charts,
statistics), so options are stored as tuples and never re-sorted.

Slack sends icons as `:shortcode:` tokens. The catalog expands them to
unicode once, at load time, and answers are matched against the expanded
labels by exact string comparison.

Public API
----------
QuestionCatalog.resolve(question_id)   -> Question   (raises UnknownQuestionError)
QuestionCatalog.get(question_id)       -> Question | None
QuestionCatalog.expand(text)           -> str
option_index(question, label)          -> int        (-1 when not found)
Question.label_of(index)               -> str        (inverse of option_index)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import emoji

from goodday.core.errors import UnknownQuestionError


def expand_icons(text: str) -> str:
    """Replace `:shortcode:` tokens with their unicode emoji."""
    return emoji.emojize(text, language="alias")


def strip_icons(text: str) -> str:
    """Drop emoji entirely, for render targets without emoji glyphs."""
    return " ".join(emoji.replace_emoji(text, replace="").split())


@dataclass(frozen=True)
class Question:
    id: str
    title: str
    options: tuple[str, ...]
    placeholder: str = ""
    title_with_icons: str = field(init=False)
    options_with_icons: tuple[str, ...] = field(init=False)

    def __post_init__(self):
        if not self.options:
            raise ValueError(f"question {self.id!r} must have at least one option")
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(self, "title_with_icons", expand_icons(self.title))
        object.__setattr__(
            self, "options_with_icons", tuple(expand_icons(o) for o in self.options)
        )

    @property
    def plain_title(self) -> str:
        return strip_icons(self.title_with_icons)

    @property
    def size(self) -> int:
        return len(self.options)

    @property
    def max_index(self) -> int:
        return len(self.options) - 1

    def label_of(self, index: int) -> str:
        if not 0 <= index < len(self.options_with_icons):
            raise IndexError(f"{self.id}: option index {index} outside [0, {self.max_index}]")
        return self.options_with_icons[index]

    def plain_label_of(self, index: int) -> str:
        return strip_icons(self.label_of(index))


def option_index(question: Question, label: Optional[str]) -> int:
    """
    Position of `label` in the question's option list, or -1.

    Matching is exact (case, punctuation and icons included). Blank or
    missing answers are simply not found.
    """
    if not label:
        return -1
    try:
        return question.options_with_icons.index(label)
    except ValueError:
        return -1


class QuestionCatalog:
    """Read-only lookup over a fixed set of questions."""

    def __init__(self, questions: Iterable[Question]):
        self._questions: tuple[Question, ...] = tuple(questions)
        self._by_id: dict[str, Question] = {}
        for q in self._questions:
            if q.id in self._by_id:
                raise ValueError(f"duplicate question id {q.id!r}")
            self._by_id[q.id] = q

    def __iter__(self):
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    @property
    def ids(self) -> list[str]:
        return [q.id for q in self._questions]

    def get(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)

    def resolve(self, question_id: str) -> Question:
        question = self._by_id.get(question_id)
        if question is None:
            raise UnknownQuestionError(question_id)
        return question

    @staticmethod
    def expand(text: str) -> str:
        return expand_icons(text)


# ---------------------------------------------------------------------------
# The Good Day survey
# ---------------------------------------------------------------------------

AMOUNT_OF_DAY = (
    "None of the day",
    "A little of the day",
    "Some of the day",
    "Much of the day",
    "Most or all of the day",
)

TIME_OF_DAY = (
    ":sunrise: In the morning (9:00–11:00)",
    ":clock12: Mid-day (11:00-13:00)",
    ":clock2: Early afternoon (13:00-15:00)",
    ":clock5: Late afternoon (15:00-17:00)",
    ":night_with_stars: Outside of typical work hours",
    ":date: Equally throughout the day",
)

QUESTIONS: tuple[Question, ...] = (
    Question(
        id="workday_quality",
        title=":thinking_face: How was your workday?",
        placeholder="My workday was…",
        options=(
            ":sob: Terrible",
            ":slightly_frowning_face: Bad",
            ":neutral_face: OK",
            ":slightly_smiling_face: Good",
            ":heart_eyes: Awesome!",
        ),
    ),
    Question(
        id="worked_with_other_people",
        title=":busts_in_silhouette: I worked with other people…",
        placeholder="How much?",
        options=AMOUNT_OF_DAY,
    ),
    Question(
        id="helped_other_people",
        title=":raised_hands: I helped other people…",
        placeholder="How much?",
        options=AMOUNT_OF_DAY,
    ),
    Question(
        id="interrupted",
        title=":rotating_light: My work was interrupted…",
        placeholder="How much?",
        options=AMOUNT_OF_DAY,
    ),
    Question(
        id="goals",
        title=":dart: I made progress towards my goals…",
        placeholder="How much?",
        options=AMOUNT_OF_DAY,
    ),
    Question(
        id="high_quality_work",
        title=":sparkles: I did high-quality work…",
        placeholder="How much?",
        options=AMOUNT_OF_DAY,
    ),
    Question(
        id="lot_of_work",
        title=":rocket: I did a lot of work…",
        placeholder="How much?",
        options=AMOUNT_OF_DAY,
    ),
    Question(
        id="breaks",
        title=":coffee: I took breaks today…",
        placeholder="How often?",
        options=AMOUNT_OF_DAY,
    ),
    Question(
        id="meetings",
        title=":speaking_head_in_silhouette: How many meetings did you have today?",
        placeholder="How many?",
        options=("None", "1", "2", "3–4", "5 or more"),
    ),
    Question(
        id="emotions",
        title=":thought_balloon: How do you feel about your workday?",
        placeholder="I feel…",
        options=(
            ":grimacing: Tense or nervous",
            ":worried: Stressed or upset",
            ":cry: Sad or depressed",
            ":yawning_face: Bored",
            ":relaxed: Calm or relaxed",
            ":relieved: Serene or content",
            ":slightly_smiling_face: Happy or elated",
            ":grinning: Excited or alert",
        ),
    ),
    Question(
        id="most_productive",
        title=":chart_with_upwards_trend: Today, I felt *most* productive:",
        placeholder="When?",
        options=TIME_OF_DAY,
    ),
    Question(
        id="least_productive",
        title=":chart_with_downwards_trend: Today, I felt *least* productive:",
        placeholder="When?",
        options=TIME_OF_DAY,
    ),
)

QUALITY_QUESTION_ID = "workday_quality"
PRODUCTIVE_QUESTION_IDS = ("most_productive", "least_productive")
AMOUNT_OF_DAY_QUESTION_IDS = (
    "worked_with_other_people",
    "helped_other_people",
    "interrupted",
    "goals",
    "high_quality_work",
    "lot_of_work",
    "breaks",
)

catalog = QuestionCatalog(QUESTIONS)
