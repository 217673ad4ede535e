# quiz/schemas.py
from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
    model_validator,
)


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[StrictStr, AfterValidator(_not_blank)]


class TestType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    OPEN_ENDED = "open_ended"
    MIXED = "mixed"

    # keep pytest from collecting this enum as a test class
    __test__ = False


class QuestionBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    question: NonBlankStr
    explanation: NonBlankStr


class MultipleChoiceQuestion(QuestionBase):
    type: Literal["multiple_choice"]
    options: List[StrictStr] = Field(min_length=2)
    correct_answer_index: StrictInt = Field(alias="correctAnswerIndex", ge=0)

    @model_validator(mode="after")
    def _index_within_options(self):
        if self.correct_answer_index >= len(self.options):
            raise ValueError("correctAnswerIndex is out of range for options")
        return self


class TrueFalseQuestion(QuestionBase):
    type: Literal["true_false"]
    correct_answer: StrictBool = Field(alias="correctAnswer")


class OpenEndedQuestion(QuestionBase):
    type: Literal["open_ended"]
    ideal_answer: NonBlankStr = Field(alias="idealAnswer")


Question = Annotated[
    Union[MultipleChoiceQuestion, TrueFalseQuestion, OpenEndedQuestion],
    Field(discriminator="type"),
]

QuestionAdapter = TypeAdapter(Question)

GRADED_TYPES = frozenset({"multiple_choice", "true_false"})


def parse_question(record) -> Union[MultipleChoiceQuestion, TrueFalseQuestion, OpenEndedQuestion]:
    """Validate one loosely-typed record into its typed variant (raises ValidationError)."""
    return QuestionAdapter.validate_python(record)


def dump_question(question: QuestionBase) -> dict:
    """Serialise a typed question back to its wire (camelCase) form."""
    return question.model_dump(by_alias=True)
