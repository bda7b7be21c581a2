"""Model selector and cost estimator.

Classifies prompts, projects output length, prices variants from the model
catalog and picks the best variant for a set of task requirements.

Example:
    >>> from model_advisor.selector import find_optimal_model, SelectionRequest
    >>>
    >>> result = find_optimal_model(SelectionRequest(task_type="code_generation", optimize_for="cost"))
    >>> result.recommended_model, result.alternatives
"""

from model_advisor.data_objs.model_details import SelectionRequest, SelectionResult

from .costs import compare_costs, estimate_cost
from .estimator import estimate_output_tokens, resolve_expected_output
from .inference import detect_task_type, detect_verbosity
from .models import CatalogError, get_catalog, get_model, list_model_names
from .router import find_optimal_model

__all__ = [
    "CatalogError",
    "SelectionRequest",
    "SelectionResult",
    "compare_costs",
    "detect_task_type",
    "detect_verbosity",
    "estimate_cost",
    "estimate_output_tokens",
    "find_optimal_model",
    "get_catalog",
    "get_model",
    "list_model_names",
    "resolve_expected_output",
]
