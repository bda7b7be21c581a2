import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(ROOT / "src"))

from model_advisor.config import settings  # noqa: E402
from model_advisor.data_objs.model_details import ModelVariant, Pricing  # noqa: E402
from model_advisor.selector.models import build_catalog  # noqa: E402


@pytest.fixture(autouse=True)
def disable_exact_token_count(monkeypatch):
    """Keep tests offline: tiktoken may download encodings on first use."""
    monkeypatch.setattr(settings, "EXACT_TOKEN_COUNT_ENABLED", False)
    yield


@pytest.fixture
def sample_catalog():
    """Small catalog with clear winners for each objective."""
    return build_catalog([
        ModelVariant(
            name="Budget",
            max_context=16000,
            multimodal=False,
            strengths=("speed",),
            ideal_use_cases=("general", "qa"),
            limitations=("limited_reasoning",),
            features=("streaming",),
            pricing=Pricing(input=0.1, output=0.4),
        ),
        ModelVariant(
            name="Coder",
            max_context=128000,
            multimodal=False,
            strengths=("coding", "reasoning", "instruction_following", "math"),
            ideal_use_cases=("code_generation",),
            limitations=(),
            features=("function_calling", "streaming"),
            pricing=Pricing(input=3.0, output=12.0),
        ),
        ModelVariant(
            name="Vision",
            max_context=128000,
            multimodal=True,
            strengths=("multimodal", "knowledge"),
            ideal_use_cases=("general", "qa", "creative_writing"),
            limitations=("high_cost",),
            features=("function_calling", "vision", "streaming"),
            pricing=Pricing(input=5.0, output=15.0),
        ),
    ])


@pytest.fixture
def use_sample_catalog(monkeypatch, sample_catalog):
    """Swap the process catalog for the sample catalog."""
    monkeypatch.setattr("model_advisor.selector.models.MODEL_CATALOG", sample_catalog)
    return sample_catalog
