from typing import Optional

from pydantic import BaseModel, StrictStr


class RunResult(BaseModel):
    stdout: Optional[StrictStr] = None
    stderr: Optional[StrictStr] = None
    compile_output: Optional[StrictStr] = None


class IdeRunRequest(BaseModel):
    code: str
    language: str
    input_str: Optional[str] = None
    problem_id: Optional[str] = None


class RunPreview(RunResult):
    output: str
