import math
from typing import List, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

TaskType = Literal[
    "code_generation",
    "creative_writing",
    "qa",
    "summarization",
    "general",
]

Verbosity = Literal["low", "medium", "high"]

OptimizationGoal = Literal["cost", "performance", "balanced"]

OutputSize = Literal["brief", "medium", "detailed"]

TASK_TYPES: tuple[str, ...] = get_args(TaskType)
VERBOSITY_LEVELS: tuple[str, ...] = get_args(Verbosity)
OPTIMIZATION_GOALS: tuple[str, ...] = get_args(OptimizationGoal)
OUTPUT_SIZES: tuple[str, ...] = get_args(OutputSize)

# Expected output tokens for each named size
OUTPUT_SIZE_TOKENS: dict[str, int] = {
    "brief": 100,
    "medium": 500,
    "detailed": 1500,
}

CONSERVATIVE_FACTOR = 0.7
MAXIMUM_FACTOR = 1.5

TOKENS_PER_PRICE_UNIT = 1_000_000


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class Pricing(BaseModel):
    """Price in currency units per 1M tokens."""

    model_config = ConfigDict(frozen=True)

    input: float = Field(ge=0)
    output: float = Field(ge=0)


class ModelVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    max_context: int = Field(gt=0)
    multimodal: bool = False
    strengths: tuple[str, ...] = ()
    ideal_use_cases: tuple[str, ...] = ()
    limitations: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    pricing: Pricing

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("model name must not be blank")
        return value

    def input_cost(self, tokens: int) -> float:
        return tokens / TOKENS_PER_PRICE_UNIT * self.pricing.input

    def output_cost(self, tokens: int) -> float:
        return tokens / TOKENS_PER_PRICE_UNIT * self.pricing.output

    @property
    def blended_price(self) -> float:
        """Average of input and output price per 1M tokens."""
        return (self.pricing.input + self.pricing.output) / 2


class OutputEstimate(BaseModel):
    conservative: int = Field(ge=0)
    expected: int = Field(ge=0)
    maximum: int = Field(ge=0)

    @classmethod
    def from_expected(cls, count: int) -> "OutputEstimate":
        """Bracket an expected token count at 0.7x and 1.5x."""
        expected = max(0, int(count))
        return cls(
            conservative=max(0, round_half_up(expected * CONSERVATIVE_FACTOR)),
            expected=expected,
            maximum=max(0, round_half_up(expected * MAXIMUM_FACTOR)),
        )


class CostEstimate(BaseModel):
    model: str
    input_tokens: int
    output_tokens: OutputEstimate
    input_cost: float
    conservative_output_cost: float
    expected_output_cost: float
    maximum_output_cost: float

    @property
    def expected_total(self) -> float:
        return self.input_cost + self.expected_output_cost

    @property
    def total_range(self) -> tuple[float, float]:
        return (
            self.input_cost + self.conservative_output_cost,
            self.input_cost + self.maximum_output_cost,
        )


class CostComparison(BaseModel):
    cheapest_model: str
    most_expensive_model: str
    savings_percent: int = Field(ge=0, le=100)


class SelectionRequest(BaseModel):
    task_type: TaskType = "general"
    context_length: int = Field(default=1000, ge=0)
    multimodal_required: bool = False
    optimize_for: OptimizationGoal = "balanced"
    max_budget: float | None = Field(default=None, ge=0)
    required_features: List[str] | None = None


class ScoredCandidate(BaseModel):
    model: str
    score: float
    cost_score: float
    performance_score: float
    context_fit_score: float
    estimated_input_cost: float


class ExcludedCandidate(BaseModel):
    model: str
    filter: str
    reason: str


class SelectionResult(BaseModel):
    recommended_model: str | None = None
    rationale: str = ""
    task_type: TaskType
    optimize_for: OptimizationGoal
    candidates: List[ScoredCandidate] = []
    excluded: List[ExcludedCandidate] = []
    alternatives: List[str] = []
    error: str | None = None
    eliminated_by: str | None = None
    available_models: List[str] | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
