"""Optimal model selection.

Flow:
1. Filter out variants that cannot serve the request (multimodal, context
   length, required features, budget)
2. Score each survivor on cost, task performance and context fit
3. Weight the scores by the optimization goal and rank
4. Break near-ties by price, then by catalog order
"""
import logging
import math
from typing import Callable, Mapping

from model_advisor.config import settings
from model_advisor.data_objs.model_details import (
    ExcludedCandidate,
    ModelVariant,
    OptimizationGoal,
    ScoredCandidate,
    SelectionRequest,
    SelectionResult,
    TaskType,
)
from .models import get_catalog

logger = logging.getLogger(__name__)

# Weights for (cost, performance, context fit)
OBJECTIVE_WEIGHTS: dict[OptimizationGoal, tuple[float, float, float]] = {
    "cost": (0.6, 0.3, 0.1),
    "performance": (0.2, 0.7, 0.1),
    "balanced": (0.45, 0.45, 0.1),
}

# Strength tags that indicate suitability for each task type
TASK_STRENGTHS: dict[TaskType, frozenset[str]] = {
    "code_generation": frozenset({"coding", "reasoning", "instruction_following", "math"}),
    "creative_writing": frozenset({"creative_writing", "nuance", "writing", "emotional_intelligence"}),
    "qa": frozenset({"knowledge", "reasoning", "accuracy", "science"}),
    "summarization": frozenset({"long_context", "instruction_following", "speed"}),
    "general": frozenset({"instruction_following", "speed", "knowledge", "multimodal"}),
}

IDEAL_USE_CASE_WEIGHT = 0.6
STRENGTH_WEIGHT = 0.4

EligibilityCheck = Callable[[ModelVariant], str | None]


def _eligibility_filters(request: SelectionRequest) -> list[tuple[str, EligibilityCheck]]:
    """Ordered (filter name, check) pairs; a check returns a reason when the variant fails."""
    filters: list[tuple[str, EligibilityCheck]] = []

    if request.multimodal_required:
        filters.append((
            "multimodal",
            lambda v: None if v.multimodal else "does not support multimodal input",
        ))

    filters.append((
        "context_length",
        lambda v: None if v.max_context >= request.context_length
        else f"max context {v.max_context} < requested {request.context_length} tokens",
    ))

    if request.required_features:
        required = {f.strip().lower() for f in request.required_features if f.strip()}

        def check_features(v: ModelVariant) -> str | None:
            missing = required - {f.lower() for f in v.features}
            return f"missing features: {', '.join(sorted(missing))}" if missing else None

        if required:
            filters.append(("required_features", check_features))

    if request.max_budget is not None:
        budget = request.max_budget

        def check_budget(v: ModelVariant) -> str | None:
            minimum = v.input_cost(request.context_length)
            return f"minimum input cost ${minimum:.6f} exceeds budget ${budget:.6f}" if minimum > budget else None

        filters.append(("max_budget", check_budget))

    return filters


def filter_eligible(
        request: SelectionRequest,
        catalog: Mapping[str, ModelVariant],
) -> tuple[list[ModelVariant], list[ExcludedCandidate], str | None]:
    """Apply the eligibility filters in order.

    Returns:
        (eligible variants in catalog order, exclusions, name of the filter that
        removed the last candidate or None)
    """
    surviving = list(catalog.values())
    excluded: list[ExcludedCandidate] = []
    if not surviving:
        return [], excluded, None

    for filter_name, check in _eligibility_filters(request):
        kept = []
        for variant in surviving:
            reason = check(variant)
            if reason is None:
                kept.append(variant)
            else:
                logger.debug(f"Excluded {variant.name} by {filter_name}: {reason}")
                excluded.append(ExcludedCandidate(model=variant.name, filter=filter_name, reason=reason))
        surviving = kept
        if not surviving:
            return [], excluded, filter_name

    return surviving, excluded, None


def cost_scores(variants: list[ModelVariant]) -> dict[str, float]:
    """Log-scaled price score in [0, 1]; the cheapest eligible variant scores 1."""
    prices = {v.name: math.log1p(v.blended_price) for v in variants}
    low, high = min(prices.values()), max(prices.values())
    if high - low <= 0:
        return {name: 1.0 for name in prices}
    return {name: 1.0 - (price - low) / (high - low) for name, price in prices.items()}


def performance_score(variant: ModelVariant, task_type: TaskType) -> float:
    """Suitability for the task from ideal use cases and declared strengths, in [0, 1]."""
    score = IDEAL_USE_CASE_WEIGHT if task_type in variant.ideal_use_cases else 0.0
    wanted = TASK_STRENGTHS.get(task_type, TASK_STRENGTHS["general"])
    matches = len(wanted & set(variant.strengths))
    return score + STRENGTH_WEIGHT * matches / len(wanted)


def context_fit_score(variant: ModelVariant, context_length: int, headroom_ratio: float | None = None) -> float:
    """1.0 up to the headroom ratio, decaying with the log of extra over-provisioning."""
    headroom_ratio = headroom_ratio or settings.CONTEXT_HEADROOM_RATIO
    ratio = variant.max_context / max(context_length, 1)
    if ratio <= headroom_ratio:
        return 1.0
    return 1.0 / (1.0 + math.log10(ratio / headroom_ratio))


def _rank(scored: list[tuple[ScoredCandidate, ModelVariant, int]], epsilon: float):
    """Order by score bucketed to ``epsilon``, then blended price, then catalog index."""
    def key(entry):
        candidate, variant, index = entry
        bucket = round(candidate.score / epsilon) if epsilon > 0 else candidate.score
        return -bucket, variant.blended_price, index

    return sorted(scored, key=key)


def _rationale(request: SelectionRequest, ranked: list[ScoredCandidate], winner: ModelVariant) -> str:
    best = ranked[0]
    parts = [
        f"{best.model} scored {best.score:.3f} with '{request.optimize_for}' optimization "
        f"(cost {best.cost_score:.2f}, performance {best.performance_score:.2f}, "
        f"context fit {best.context_fit_score:.2f})."
    ]
    if request.task_type in winner.ideal_use_cases:
        parts.append(f"It lists {request.task_type} as an ideal use case.")
    parts.append(
        f"Pricing ${winner.pricing.input:.2f}/${winner.pricing.output:.2f} per 1M input/output tokens, "
        f"context window {winner.max_context} tokens."
    )
    if len(ranked) > 1:
        runner_up = ranked[1]
        parts.append(f"Runner-up: {runner_up.model} ({runner_up.score:.3f}).")
    parts.append(f"{len(ranked)} eligible model(s) considered.")
    return " ".join(parts)


def find_optimal_model(
        request: SelectionRequest,
        catalog: Mapping[str, ModelVariant] | None = None,
) -> SelectionResult:
    """Select the best catalog variant for a request.

    Never raises for unsatisfiable requests: when no variant survives the
    eligibility filters the result carries ``error`` and ``eliminated_by``.

    Example:
        result = find_optimal_model(SelectionRequest(task_type="qa", optimize_for="cost"))
        if result.ok:
            print(result.recommended_model, result.rationale)
    """
    catalog = catalog if catalog is not None else get_catalog()
    logger.info(
        f"Selecting model: task={request.task_type} context={request.context_length} "
        f"multimodal={request.multimodal_required} optimize_for={request.optimize_for} "
        f"max_budget={request.max_budget} required_features={request.required_features}"
    )

    eligible, excluded, eliminated_by = filter_eligible(request, catalog)

    if not eligible:
        if eliminated_by is None:
            error = "No eligible model: the model catalog is empty"
        else:
            error = f"No eligible model: all models were excluded by the {eliminated_by} constraint"
        logger.warning(error)
        return SelectionResult(
            task_type=request.task_type,
            optimize_for=request.optimize_for,
            excluded=excluded,
            error=error,
            eliminated_by=eliminated_by,
            available_models=list(catalog.keys()),
        )

    w_cost, w_perf, w_fit = OBJECTIVE_WEIGHTS[request.optimize_for]
    costs = cost_scores(eligible)
    order = {name: index for index, name in enumerate(catalog.keys())}

    scored = []
    for variant in eligible:
        cost = costs[variant.name]
        perf = performance_score(variant, request.task_type)
        fit = context_fit_score(variant, request.context_length)
        candidate = ScoredCandidate(
            model=variant.name,
            score=w_cost * cost + w_perf * perf + w_fit * fit,
            cost_score=cost,
            performance_score=perf,
            context_fit_score=fit,
            estimated_input_cost=variant.input_cost(request.context_length),
        )
        scored.append((candidate, variant, order[variant.name]))

    ranked = _rank(scored, settings.SCORE_TIE_EPSILON)
    candidates = [candidate for candidate, _, _ in ranked]
    winner = ranked[0][1]

    logger.info(f"Found {len(candidates)} eligible models, recommending {winner.name}:")
    for i, c in enumerate(candidates, 1):
        logger.info(
            f"  {i}. {c.model:15} score: {c.score:.3f}  cost: {c.cost_score:.2f}  "
            f"perf: {c.performance_score:.2f}  fit: {c.context_fit_score:.2f}"
        )

    return SelectionResult(
        recommended_model=winner.name,
        rationale=_rationale(request, candidates, winner),
        task_type=request.task_type,
        optimize_for=request.optimize_for,
        candidates=candidates,
        excluded=excluded,
        alternatives=[c.model for c in candidates[1:3]],
    )
