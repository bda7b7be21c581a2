"""Output token projection."""

import logging
import math

from model_advisor.data_objs.model_details import (
    OUTPUT_SIZE_TOKENS,
    OutputEstimate,
    TaskType,
    Verbosity,
)

logger = logging.getLogger(__name__)

# Expected output tokens per (task type, verbosity)
BASE_OUTPUT_TOKENS: dict[TaskType, dict[Verbosity, int]] = {
    "code_generation": {"low": 150, "medium": 400, "high": 1000},
    "creative_writing": {"low": 300, "medium": 800, "high": 2000},
    "qa": {"low": 50, "medium": 250, "high": 700},
    "summarization": {"low": 100, "medium": 250, "high": 500},
    "general": {"low": 100, "medium": 400, "high": 1000},
}


def estimate_output_tokens(input_tokens: int, task_type: TaskType, verbosity: Verbosity) -> OutputEstimate:
    """Project output tokens as a conservative/expected/maximum range.

    Unknown task types and verbosity levels fall back to "general" and "medium".
    A summary is never expected to be longer than its (non-empty) source.
    """
    by_verbosity = BASE_OUTPUT_TOKENS.get(task_type, BASE_OUTPUT_TOKENS["general"])
    expected = by_verbosity.get(verbosity, by_verbosity["medium"])

    if task_type == "summarization" and input_tokens > 0:
        expected = min(expected, input_tokens)

    return OutputEstimate.from_expected(expected)


def resolve_expected_output(expected_output: int | float | str) -> OutputEstimate:
    """Bracket a caller-supplied output size: a token count or "brief"/"medium"/"detailed".

    Raises:
        ValueError: If a named size is not recognised or a count is not finite.
    """
    if isinstance(expected_output, str):
        if expected_output not in OUTPUT_SIZE_TOKENS:
            raise ValueError(
                f"Unknown expected_output size '{expected_output}'. "
                f"Use one of {', '.join(OUTPUT_SIZE_TOKENS)} or a token count"
            )
        count = OUTPUT_SIZE_TOKENS[expected_output]
    else:
        if not math.isfinite(expected_output):
            raise ValueError(f"expected_output must be a finite token count, got {expected_output}")
        count = int(round(expected_output))

    return OutputEstimate.from_expected(count)
