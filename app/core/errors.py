
class JudgeError(Exception):
    retryable = True
    kind = "judge_error"
    default_detail = "The request could not be completed."

    def __init__(self, detail: str = None, *args):
        super().__init__(detail or self.default_detail, *args)
        self.detail = detail or self.default_detail


class RunnerError(JudgeError):
    """The code runner was unreachable or answered with something unusable."""
    kind = "runner_error"
    default_detail = "Could not run code. Please try again."


class RecordError(JudgeError):
    """A verdict was computed but the submission store did not accept it."""
    kind = "record_error"
    default_detail = "Submission could not be saved."


class DataFetchError(JudgeError):
    kind = "data_fetch_error"
    default_detail = "Could not load data. Please try again."
