from datetime import datetime, timezone
from typing import Annotated, Any, Optional, Union

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, Strict, StrictInt, StrictStr, TypeAdapter

FiniteStrictFloat = Annotated[float, Strict(), AllowInfNan(False)]

# Stored answer values: free text, a number (e.g. a 1-10 scale), or a multi-select list.
AnswerValue = Union[StrictStr, StrictInt, FiniteStrictFloat, list[StrictStr]]

answer_value_adapter: TypeAdapter[Any] = TypeAdapter(AnswerValue)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    answers: dict[str, AnswerValue] = Field(default_factory=dict)
    completed: bool = False
    last_updated: datetime = Field(default_factory=now_utc, alias="lastUpdated")

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


session_list_adapter: TypeAdapter[list[Session]] = TypeAdapter(list[Session])


class StartSessionRequest(BaseModel):
    name: Optional[str] = None


class StartSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")


class SaveAnswerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    question_id: str = Field(alias="questionId")
    answer: Any = None


class CompleteSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")


class SuccessResponse(BaseModel):
    success: bool = True


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_responses: int = Field(default=0, alias="totalResponses")
    average_confidence: float = Field(default=0, alias="averageConfidence")
    tag_frequency: dict[str, dict[str, int]] = Field(default_factory=dict, alias="tagFrequency")

    def tags(self, key: str) -> dict[str, int]:
        return dict(self.tag_frequency.get(key, {}))


class AdminReportResponse(BaseModel):
    report: Report
    responses: list[Session]
