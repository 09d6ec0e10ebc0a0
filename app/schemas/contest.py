from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.problem import ProblemMinimal


class ContestType(str, Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"


class ContestStatus(str, Enum):
    UPCOMING = "upcoming"
    RUNNING = "running"
    FINISHED = "finished"


class SortKey(str, Enum):
    NEWEST = "newest"
    STATUS = "status"
    DIFFICULTY = "difficulty"
    PARTICIPANTS = "participants"


ALL = "all"


class Contest(BaseModel):
    id: str = Field(alias="_id")
    title: str
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    problems: List[ProblemMinimal] = []
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    type: ContestType = ContestType.INDIVIDUAL
    participant_count: Optional[int] = Field(None, alias="participantsCount")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("start_time", "end_time", "created_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        return value.lower() if isinstance(value, str) else value


class ContestFilters(BaseModel):
    q: str = ""
    type: str = ALL
    status: str = ALL

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        value = value.lower()
        if value != ALL:
            ContestType(value)
        return value

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: str) -> str:
        value = value.lower()
        if value != ALL:
            ContestStatus(value)
        return value


class ContestSearchQuery(ContestFilters):
    sort: SortKey = SortKey.NEWEST


class ContestSummary(BaseModel):
    id: str
    title: str
    type: ContestType
    status: ContestStatus
    start_time: datetime
    end_time: datetime
    created_at: Optional[datetime] = None
    problem_count: int
    max_difficulty: int
    participant_count: int


class ContestListing(BaseModel):
    items: List[ContestSummary] = []
    total: int = 0
    error: Optional[str] = None
