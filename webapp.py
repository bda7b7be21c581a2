"""FastAPI app exposing the model advisor over REST.

Available endpoints:
- GET /api/health - Health check
- POST /api/optimal-model - Recommend a model for task requirements
- POST /api/estimate-cost - Estimate the cost of running a prompt through models
- GET /api/models - List models, optionally grouped by category
- GET /api/models/{model_name} - Get specific model details
- POST /api/compare - Compare models side by side
- GET /api/config - Get current configuration settings

Authentication:
- Protected endpoints require API key via Bearer token when REQUIRE_AUTH=true
- Set API_KEY and REQUIRE_AUTH=true in environment variables

Run with:
    uvicorn webapp:app --reload
"""

import logging
from typing import Annotated, List

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from model_advisor import tools
from model_advisor.config import settings
from model_advisor.data_objs.model_details import OptimizationGoal, OutputSize, TaskType
from model_advisor.logging_config import setup_logging
from model_advisor.selector.models import get_catalog

setup_logging()
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Security scheme for API key authentication
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Verify API key for protected endpoints.

    Raises:
        HTTPException: If authentication is required and token is invalid
    """
    if not settings.REQUIRE_AUTH:
        return credentials.credentials if credentials else ""

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide Authorization: Bearer <API_KEY>",
        )

    if settings.API_KEY and credentials.credentials == settings.API_KEY:
        return credentials.credentials

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid API key",
    )


class OptimalModelRequest(BaseModel):
    task_type: TaskType
    context_length: int = Field(default=1000, ge=0, description="Approximate input token count")
    multimodal_required: bool = Field(default=False, description="Whether vision/audio capabilities are needed")
    optimize_for: OptimizationGoal = "balanced"
    max_budget: float | None = Field(default=None, ge=0, description="Max cost per request in USD")
    required_features: List[str] | None = None


class EstimateCostRequest(BaseModel):
    text: str
    models: List[str] | None = Field(default=None, description="Models to price; popular models when omitted")
    force_brevity: bool = False
    expected_output: int | OutputSize | None = Field(
        default=None,
        description="'brief' (~100 tokens), 'medium' (~500), 'detailed' (~1500) or an exact token count",
    )


class CompareModelsRequest(BaseModel):
    models: List[str]
    comparison_aspects: List[str] | None = Field(
        default=None,
        description="pricing, context_window, multimodal, strengths, ideal_use_cases, limitations, features",
    )


def _not_found(result: dict) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=result)


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Model Advisor API",
    description="Selects the best-suited language model for a task and estimates what a prompt will cost",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Model Advisor API",
        "version": API_VERSION,
        "docs": "/docs",
        "tools": [
            "get_optimal_model",
            "estimate_text_cost",
            "get_model_details",
            "compare_models",
            "list_models",
        ],
    }


@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "version": API_VERSION,
        "auth_required": settings.REQUIRE_AUTH,
        "models_loaded": len(get_catalog()),
    }


@app.post("/api/optimal-model")
async def optimal_model(
    body: OptimalModelRequest,
    api_key: Annotated[str, Depends(verify_api_key)],
):
    """Recommend the optimal model for the given task requirements.

    A request no model can satisfy is answered with ``error`` and
    ``eliminated_by`` fields rather than an HTTP error.
    """
    return tools.get_optimal_model(**body.model_dump())


@app.post("/api/estimate-cost")
async def estimate_cost(
    body: EstimateCostRequest,
    api_key: Annotated[str, Depends(verify_api_key)],
):
    """Estimate input and output cost of a prompt across models."""
    result = await tools.estimate_text_cost(**body.model_dump())
    if "error" in result:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result)
    return result


@app.get("/api/models")
async def list_models(
    api_key: Annotated[str, Depends(verify_api_key)],
    categories: Annotated[List[str] | None, Query()] = None,
    include_details: bool = False,
):
    """List all models, optionally grouped by category (flagship, multimodal,
    cost-optimized, reasoning, legacy)."""
    return tools.list_models(categories=categories, include_details=include_details)


@app.get("/api/models/{model_name}")
async def get_model_details(
    model_name: str,
    api_key: Annotated[str, Depends(verify_api_key)],
):
    result = tools.get_model_details(model_name)
    if "error" in result:
        return _not_found(result)
    return result


@app.post("/api/compare")
async def compare_models(
    body: CompareModelsRequest,
    api_key: Annotated[str, Depends(verify_api_key)],
):
    result = tools.compare_models(body.models, body.comparison_aspects)
    if "error" in result:
        return _not_found(result)
    return result


@app.get("/api/config")
async def get_config(
    api_key: Annotated[str, Depends(verify_api_key)],
):
    """Get current configuration settings (non-sensitive)."""
    return {
        "model_catalog_csv_path": settings.MODEL_CATALOG_CSV_PATH,
        "default_cost_models": settings.DEFAULT_COST_MODELS,
        "exact_token_count_enabled": settings.EXACT_TOKEN_COUNT_ENABLED,
        "tokenizer_encoding": settings.TOKENIZER_ENCODING,
        "approx_chars_per_token": settings.APPROX_CHARS_PER_TOKEN,
        "context_headroom_ratio": settings.CONTEXT_HEADROOM_RATIO,
    }


logger.info("Model advisor app loaded with endpoints at /api/*")
