"""Task type and verbosity inference from raw prompt text.

Classification is rule-based: each rule is a (outcome, patterns) pair and the
rules are checked in declaration order. The first rule with any matching
pattern wins; text matching no rule gets the default outcome.
"""

import logging
import re
from typing import Iterable

from model_advisor.data_objs.model_details import TaskType, Verbosity

logger = logging.getLogger(__name__)

# Ordered by priority
TASK_TYPE_RULES: list[tuple[TaskType, list[str]]] = [
    ("code_generation", [
        r"```",  # Fenced code block
        r"\bdef\s+\w+\s*\(",  # Python function
        r"\bfunction\s+\w+\s*\(",  # JavaScript function
        r"\bclass\s+[A-Z]\w*\s*[:({]",  # Class declaration
        r"^\s*(import\s+[\w.]+\s*$|from\s+[\w.]+\s+import\s)",  # Import statement
        r"#include\s*<",  # C/C++ include
        r"\b(const|let|var)\s+\w+\s*=",  # JS variable
        r"\b(write|create|implement|generate|build)\b.{0,40}\b(functions?|methods?|code|api|endpoints?|sql query|unit tests?)\b",
        r"\b(debug|refactor|compile|unit tests?|stack trace|regex|sql query)\b",
        r"\b(python|javascript|typescript|golang|rust|c\+\+|java|kotlin|bash)\s+(code|function|script|program)\b",
        r"\b(shell|powershell|cron|deploy(ment)?|automation)\s+scripts?\b",
        r"\b(program|script|class)\s+(that|which|to)\s+(reads?|parses?|prints?|computes?|calculates?|sorts?|returns?|converts?|validates?)\b",
    ]),
    ("summarization", [
        r"\bsummari[sz](e|es|ed|ing|ation)\b",
        r"\bsummary\b",
        r"\btl;?dr\b",
        r"\b(key|main) (points|takeaways)\b",
        r"\b(condense|recap)\b",
    ]),
    ("creative_writing", [
        r"\b(story|stories|poem|poetry|haiku|sonnet|limerick|lyrics|novel|fiction|fairy tale|screenplay|fable)\b",
        r"\b(movie|film|tv|stage|radio)\s+scripts?\b",
        r"\bonce upon a time\b",
        r"\b(write|compose)\b.{0,30}\b(narrative|song|essay|tale|dialogue|scene)\b",
        r"\b(plot|protagonist|characters?)\b.{0,40}\b(story|chapter|book)\b",
    ]),
    ("qa", [
        r"\?\s*$",  # Ends with a question mark
        r"^\s*(what|who|whom|whose|when|where|why|how|which|is|are|can|could|does|did|should|would)\b",
        r"\b(explain|define|tell me|what is|what are)\b",
    ]),
]

VERBOSITY_RULES: list[tuple[Verbosity, list[str]]] = [
    ("low", [
        r"\bbrief(ly)?\b",
        r"\bin (one|a single|1) (sentence|line|word|paragraph)\b",
        r"\bconcise(ly)?\b",
        r"\b(short|quick) (answer|reply|response|summary)\b",
        r"\bkeep it short\b",
        r"\bin a few words\b",
        r"\bone[- ]liner\b",
        r"\btl;?dr\b",
    ]),
    ("high", [
        r"\bin (great |more )?detail\b",
        r"\bdetailed\b",
        r"\bcomprehensive(ly)?\b",
        r"\bthorough(ly)?\b",
        r"\bin[- ]depth\b",
        r"\bstep[- ]by[- ]step\b",
        r"\belaborate\b",
        r"\bexhaustive(ly)?\b",
        r"\bextensive(ly)?\b",
        r"\bcomplete guide\b",
    ]),
]

DEFAULT_TASK_TYPE: TaskType = "general"
DEFAULT_VERBOSITY: Verbosity = "medium"

_FLAGS = re.IGNORECASE | re.MULTILINE


def _compile(rules: Iterable[tuple[str, list[str]]]) -> list[tuple[str, list[re.Pattern]]]:
    return [(outcome, [re.compile(p, _FLAGS) for p in patterns]) for outcome, patterns in rules]


COMPILED_TASK_TYPE_RULES = _compile(TASK_TYPE_RULES)
COMPILED_VERBOSITY_RULES = _compile(VERBOSITY_RULES)


def match_rule(text: str, rules: list[tuple[str, list[re.Pattern]]]) -> tuple[str, str] | None:
    """Return (outcome, pattern) for the first rule with a matching pattern."""
    for outcome, patterns in rules:
        for pattern in patterns:
            if pattern.search(text):
                return outcome, pattern.pattern
    return None


def detect_task_type(text: str) -> TaskType:
    """Infer the task type of a prompt; "general" when nothing matches."""
    if not text or not isinstance(text, str):
        return DEFAULT_TASK_TYPE

    matched = match_rule(text, COMPILED_TASK_TYPE_RULES)
    if matched is None:
        return DEFAULT_TASK_TYPE

    task_type, pattern = matched
    logger.debug(f"Task type '{task_type}' matched pattern {pattern!r}")
    return task_type


def detect_verbosity(text: str) -> Verbosity:
    """Infer how long a response the prompt asks for; "medium" when nothing matches."""
    if not text or not isinstance(text, str):
        return DEFAULT_VERBOSITY

    matched = match_rule(text, COMPILED_VERBOSITY_RULES)
    if matched is None:
        return DEFAULT_VERBOSITY

    verbosity, pattern = matched
    logger.debug(f"Verbosity '{verbosity}' matched pattern {pattern!r}")
    return verbosity
