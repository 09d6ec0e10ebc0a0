import re

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Canonical form used to compare expected and actual program output.

    Line endings are unified first, then tabs and every whitespace run are deleted
    (not collapsed) and the result is lower-cased. ``normalize`` is idempotent.
    """
    if text is None:
        return ""
    text = text.replace("\r\n", "\n")
    text = text.replace("\r", "\n")
    text = text.replace("\t", "")
    text = _WHITESPACE_RUN.sub("", text)
    return text.strip().lower()


def outputs_match(actual: str, expected: str) -> bool:
    return normalize(actual) == normalize(expected)
