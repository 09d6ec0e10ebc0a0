from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return DIFFICULTY_RANK[self]


DIFFICULTY_RANK = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 3,
}


class TestCase(BaseModel):
    input: str = ""
    expected_output: str = Field("", alias="expectedOutput")

    model_config = ConfigDict(populate_by_name=True)


class ProblemMinimal(BaseModel):
    id: str = Field(alias="_id")
    title: str
    difficulty: Optional[Difficulty] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, value):
        return value.lower() if isinstance(value, str) else value


class Problem(BaseModel):
    id: str = Field(alias="_id")
    title: str
    description: str = ""
    difficulty: Difficulty
    category: str = ""
    languages: List[str] = []
    starter_code: Dict[str, str] = Field(default_factory=dict, alias="starterCode")
    test_cases: List[TestCase] = Field(default_factory=list, alias="testCases")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("languages", mode="before")
    @classmethod
    def _lower_languages(cls, value):
        if isinstance(value, list):
            return [lang.lower() if isinstance(lang, str) else lang for lang in value]
        return value

    def supports(self, language: str) -> bool:
        return language.lower() in self.languages
