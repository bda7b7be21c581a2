"""Cost calculation from token counts and catalog pricing."""

from typing import Sequence

from model_advisor.data_objs.model_details import (
    CostComparison,
    CostEstimate,
    ModelVariant,
    OutputEstimate,
)


def estimate_cost(input_tokens: int, output_estimate: OutputEstimate, variant: ModelVariant) -> CostEstimate:
    """Price the input and each output bracket for one variant."""
    input_tokens = max(0, int(input_tokens))
    return CostEstimate(
        model=variant.name,
        input_tokens=input_tokens,
        output_tokens=output_estimate,
        input_cost=variant.input_cost(input_tokens),
        conservative_output_cost=variant.output_cost(output_estimate.conservative),
        expected_output_cost=variant.output_cost(output_estimate.expected),
        maximum_output_cost=variant.output_cost(output_estimate.maximum),
    )


def compare_costs(estimates: Sequence[CostEstimate]) -> CostComparison | None:
    """Find the cheapest and most expensive estimate by expected total cost.

    The expected total counts input as well as expected output, so a variant
    with cheap output but pricey input can lose to one that only looks dearer
    per output token. Ranking on output cost alone would pick differently
    whenever variants' input/output price ratios differ.

    Ties keep the earliest estimate. Savings is the cheapest's reduction
    versus the most expensive, as a whole percentage; 0 when the most
    expensive costs nothing.
    """
    if not estimates:
        return None

    cheapest = estimates[0]
    most_expensive = estimates[0]
    for estimate in estimates[1:]:
        if estimate.expected_total < cheapest.expected_total:
            cheapest = estimate
        if estimate.expected_total > most_expensive.expected_total:
            most_expensive = estimate

    max_cost = most_expensive.expected_total
    if max_cost > 0:
        savings = round((1 - cheapest.expected_total / max_cost) * 100)
    else:
        savings = 0

    return CostComparison(
        cheapest_model=cheapest.model,
        most_expensive_model=most_expensive.model,
        savings_percent=min(100, max(0, savings)),
    )
