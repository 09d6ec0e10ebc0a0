from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.problem import Difficulty


class Verdict(str, Enum):
    SUCCESS = "Success"
    FAILURE = "Failure"


class Evaluation(BaseModel):
    verdict: Verdict
    raw_output: str
    points: int


class SubmissionCreate(BaseModel):
    problem_id: str
    language: str
    code: str
    idempotency_key: Optional[str] = None


class SubmissionRecord(BaseModel):
    user_email: str = Field(alias="userEmail")
    user_name: str = Field(alias="userName")
    status: Verdict
    problem_title: str = Field(alias="problemTitle")
    problem_difficulty: Difficulty = Field(alias="problemDifficulty")
    problem_category: str = Field(alias="problemCategory")
    point: int
    submitted_at: Optional[datetime] = Field(None, alias="submittedAt")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("problem_difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, value):
        return value.lower() if isinstance(value, str) else value

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude={"submitted_at"})


class SubmissionAck(BaseModel):
    acknowledged: bool = True
    id: Optional[str] = None


class SubmissionResult(BaseModel):
    verdict: Verdict
    points: int
    output: str
    recorded: bool
    idempotency_key: str
    submission_id: Optional[str] = None
    record_error: Optional[str] = None


class SubmissionStats(BaseModel):
    total_submissions: int = 0
    successful_submissions: int = 0
    failed_submissions: int = 0
    total_points: int = 0


class SubmissionHistory(BaseModel):
    submissions: List[SubmissionRecord] = []
