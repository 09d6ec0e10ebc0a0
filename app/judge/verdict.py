import logging

from app.clients.runner import RunnerClient
from app.judge.normalizer import outputs_match
from app.schemas.ide import RunResult
from app.schemas.problem import TestCase
from app.schemas.submission import Evaluation, Verdict

logger = logging.getLogger(__name__)

SUCCESS_POINTS = 20
FAILURE_POINTS = -20


def effective_output(result: RunResult) -> str:
    for candidate in (result.stdout, result.stderr, result.compile_output):
        if candidate:
            return candidate
    return ""


def points_for(verdict: Verdict) -> int:
    return SUCCESS_POINTS if verdict == Verdict.SUCCESS else FAILURE_POINTS


async def run_preview(code: str, language: str, run_input: str, runner: RunnerClient) -> RunResult:
    """Run action: executes the code and returns the raw result without judging it."""
    return await runner.run(code=code, language=language, run_input=run_input)


async def evaluate(code: str, language: str, test_case: TestCase, runner: RunnerClient) -> Evaluation:
    """
    Judges ``code`` against a single test case.

    A ``RunnerError`` from the runner propagates unchanged; it is never turned into
    a failure verdict.
    """
    result = await runner.run(code=code, language=language, run_input=test_case.input)
    output = effective_output(result)

    verdict = Verdict.SUCCESS if outputs_match(output, test_case.expected_output) else Verdict.FAILURE
    logger.info(f"Evaluated {language} submission: {verdict.value}")

    return Evaluation(verdict=verdict, raw_output=output, points=points_for(verdict))
