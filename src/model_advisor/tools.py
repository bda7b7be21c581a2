"""The advisor's operations: model selection, cost estimation, details, comparison and listing.

Every operation returns a plain dict ready for JSON serialization. Expected
failures (unknown models, unsatisfiable requirements, invalid sizes) come back
as ``{"error": ..., "available_models": [...]}`` rather than exceptions.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from model_advisor.config import settings
from model_advisor.data_objs.model_details import (
    OUTPUT_SIZE_TOKENS,
    CostEstimate,
    ModelVariant,
    SelectionRequest,
)
from model_advisor.selector.costs import compare_costs, estimate_cost
from model_advisor.selector.estimator import estimate_output_tokens, resolve_expected_output
from model_advisor.selector.inference import detect_task_type, detect_verbosity
from model_advisor.selector.models import get_catalog
from model_advisor.selector.router import find_optimal_model
from model_advisor.utils.token_counter import TokenCounter, count_tokens_with_fallback

logger = logging.getLogger(__name__)


def to_fixed(value: float, places: int) -> str:
    """Fixed-point text rounding exact halves up (0.125 -> "0.13"), unlike ``format``."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_price(price: float) -> str:
    return f"${to_fixed(price, 2)} per 1M tokens"


def format_context(max_context: int) -> str:
    return f"{to_fixed(max_context / 1000, 0)}K tokens"


def format_cost(cost: float) -> str:
    return f"${to_fixed(cost, 6)}"


def format_pricing(variant: ModelVariant) -> dict[str, str]:
    return {
        "input": format_price(variant.pricing.input),
        "output": format_price(variant.pricing.output),
    }


# Recognised comparison aspects, in output order
COMPARISON_ASPECTS: dict[str, Callable[[ModelVariant], Any]] = {
    "pricing": format_pricing,
    "context_window": lambda v: format_context(v.max_context),
    "multimodal": lambda v: v.multimodal,
    "strengths": lambda v: list(v.strengths),
    "ideal_use_cases": lambda v: list(v.ideal_use_cases),
    "limitations": lambda v: list(v.limitations),
    "features": lambda v: list(v.features),
}

DEFAULT_COMPARISON_ASPECTS = ["pricing", "context_window", "multimodal", "strengths"]

FLAGSHIP_MODELS = frozenset({"GPT-4.1", "GPT-4o", "GPT-4.5"})
REASONING_MODELS = frozenset({"o1", "o3", "o4-mini"})
LEGACY_MODELS = frozenset({"GPT-3.5-Turbo", "GPT-4"})

CATEGORY_RULES: dict[str, Callable[[ModelVariant], bool]] = {
    "flagship": lambda v: v.name in FLAGSHIP_MODELS,
    "multimodal": lambda v: v.multimodal,
    "cost-optimized": lambda v: "Mini" in v.name or "Nano" in v.name,
    "reasoning": lambda v: v.name in REASONING_MODELS,
    "legacy": lambda v: v.name in LEGACY_MODELS,
}


def _error(message: str, **extra: Any) -> dict[str, Any]:
    return {
        "error": message,
        **extra,
        "available_models": list(get_catalog().keys()),
    }


def describe_aspects(variant: ModelVariant, aspects: Iterable[str] | None = None) -> dict[str, Any]:
    """Build every recognised aspect, then keep the requested ones. Unknown aspects are ignored."""
    full = {aspect: build(variant) for aspect, build in COMPARISON_ASPECTS.items()}
    wanted = set(DEFAULT_COMPARISON_ASPECTS if aspects is None else aspects)
    return {aspect: value for aspect, value in full.items() if aspect in wanted}


def summarize_model(variant: ModelVariant) -> dict[str, Any]:
    return {
        "name": variant.name,
        "multimodal": variant.multimodal,
        "max_context": format_context(variant.max_context),
        "pricing": format_pricing(variant),
    }


def get_optimal_model(
        task_type: str,
        context_length: int = 1000,
        multimodal_required: bool = False,
        optimize_for: str = "balanced",
        max_budget: float | None = None,
        required_features: list[str] | None = None,
) -> dict[str, Any]:
    """Recommend the best model for a task, with the scored candidates behind the choice."""
    try:
        request = SelectionRequest(
            task_type=task_type,
            context_length=context_length,
            multimodal_required=multimodal_required,
            optimize_for=optimize_for,
            max_budget=max_budget,
            required_features=required_features,
        )
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        return _error(f"Invalid request: {problems}")

    result = find_optimal_model(request)
    return result.model_dump(exclude_none=True)


def _format_estimate(estimate: CostEstimate) -> dict[str, Any]:
    low, high = estimate.total_range
    tokens = estimate.output_tokens
    return {
        "model": estimate.model,
        "input_cost": format_cost(estimate.input_cost),
        "output_estimates": {
            "conservative": {"tokens": tokens.conservative, "cost": format_cost(estimate.conservative_output_cost)},
            "expected": {"tokens": tokens.expected, "cost": format_cost(estimate.expected_output_cost)},
            "maximum": {"tokens": tokens.maximum, "cost": format_cost(estimate.maximum_output_cost)},
        },
        "expected_total_cost": format_cost(estimate.expected_total),
        "total_cost_range": f"{format_cost(low)} - {format_cost(high)}",
    }


async def estimate_text_cost(
        text: str,
        models: list[str] | None = None,
        force_brevity: bool = False,
        expected_output: int | float | str | None = None,
        counter: TokenCounter | None = None,
) -> dict[str, Any]:
    """Estimate what running ``text`` through each model would cost.

    Args:
        text: The prompt to analyze
        models: Models to price; DEFAULT_COST_MODELS when None
        force_brevity: Treat the prompt as asking for a short answer
        expected_output: Token count or "brief"/"medium"/"detailed"; skips the
            output heuristics when given
        counter: Exact token counter; the tiktoken counter when None

    Returns:
        Input analysis, per-model estimates, the cheapest model and the saving
        it offers over the most expensive one.
    """
    input_tokens, count_method = await count_tokens_with_fallback(text, counter)
    task_type = detect_task_type(text)
    verbosity = "low" if force_brevity else detect_verbosity(text)

    if expected_output is not None:
        try:
            output_estimate = resolve_expected_output(expected_output)
        except (ValueError, OverflowError) as e:
            return _error(str(e), available_sizes=list(OUTPUT_SIZE_TOKENS))
    else:
        output_estimate = estimate_output_tokens(input_tokens, task_type, verbosity)

    catalog = get_catalog()
    requested = settings.DEFAULT_COST_MODELS if models is None else models
    variants = [catalog[name] for name in requested if name in catalog]
    skipped = [name for name in requested if name not in catalog]
    if skipped:
        logger.info(f"Skipping unknown models: {skipped}")

    if not variants:
        return _error("No valid models specified")

    estimates = [estimate_cost(input_tokens, output_estimate, variant) for variant in variants]
    comparison = compare_costs(estimates)

    result: dict[str, Any] = {
        "input_analysis": {
            "input_tokens": input_tokens,
            "token_count_method": count_method,
            "detected_task_type": task_type,
            "verbosity": verbosity,
        },
        "model_estimates": [_format_estimate(estimate) for estimate in estimates],
        "recommended_model": comparison.cheapest_model,
        "savings": f"{comparison.savings_percent}% cost reduction vs {comparison.most_expensive_model}",
        "savings_percent": comparison.savings_percent,
    }
    if skipped:
        result["skipped_models"] = skipped
    return result


def get_model_details(model_name: str) -> dict[str, Any]:
    variant = get_catalog().get(model_name)
    if variant is None:
        return _error(f"Model '{model_name}' not found")

    return {
        "name": variant.name,
        "multimodal": variant.multimodal,
        "max_context": format_context(variant.max_context),
        "strengths": list(variant.strengths),
        "ideal_use_cases": list(variant.ideal_use_cases),
        "pricing": format_pricing(variant),
        "limitations": list(variant.limitations),
        "features": list(variant.features),
    }


def compare_models(model_names: list[str], comparison_aspects: list[str] | None = None) -> dict[str, Any]:
    """Side-by-side view of the named models; unknown names are left out."""
    catalog = get_catalog()
    valid_names = [name for name in model_names if name in catalog]

    if not valid_names:
        return _error("No valid models specified")

    return {name: describe_aspects(catalog[name], comparison_aspects) for name in valid_names}


def list_models(categories: list[str] | None = None, include_details: bool = False) -> Any:
    """List catalog models, optionally grouped by category.

    Without categories returns a list of names (or model summaries). With
    categories returns a mapping of each requested category to its models;
    unrecognised categories map to an empty list.
    """
    catalog = get_catalog()
    render = summarize_model if include_details else (lambda v: v.name)

    if not categories:
        return [render(variant) for variant in catalog.values()]

    grouped: dict[str, list] = {}
    for category in categories:
        rule = CATEGORY_RULES.get(category)
        if rule is None:
            logger.info(f"Unknown model category '{category}'")
        grouped[category] = [render(v) for v in catalog.values() if rule is not None and rule(v)]
    return grouped
