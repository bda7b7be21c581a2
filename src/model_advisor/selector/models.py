"""Model catalog for the model advisor.

The catalog is read once from CSV at import time, validated, and exposed
through read-only accessors for the lifetime of the process.
"""

import csv
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from pydantic import ValidationError

from model_advisor.config import settings
from model_advisor.data_objs.model_details import ModelVariant, Pricing
from model_advisor.utils.path_utils import resolve_csv_path

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = (
    "name",
    "max_context",
    "multimodal",
    "strengths",
    "ideal_use_cases",
    "limitations",
    "features",
    "input_price",
    "output_price",
)

LIST_SEPARATOR = "|"


class CatalogError(ValueError):
    """Raised when catalog data is missing or malformed."""


def _split_tags(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(tag.strip() for tag in value.split(LIST_SEPARATOR) if tag.strip())


def _parse_bool(value: str | None) -> bool:
    return bool(value) and value.strip().lower() in ("true", "yes", "1")


def _row_to_variant(row: dict[str, str], line_number: int) -> ModelVariant:
    try:
        return ModelVariant(
            name=row["name"],
            max_context=row["max_context"],
            multimodal=_parse_bool(row["multimodal"]),
            strengths=_split_tags(row["strengths"]),
            ideal_use_cases=_split_tags(row["ideal_use_cases"]),
            limitations=_split_tags(row["limitations"]),
            features=_split_tags(row["features"]),
            pricing=Pricing(input=row["input_price"], output=row["output_price"]),
        )
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog row at line {line_number} ({row.get('name')!r}): {e}") from e


def build_catalog(variants: Iterable[ModelVariant]) -> Mapping[str, ModelVariant]:
    """Index variants by name, preserving declaration order.

    Raises:
        CatalogError: If a name is declared twice.
    """
    catalog: dict[str, ModelVariant] = {}
    for variant in variants:
        if variant.name in catalog:
            raise CatalogError(f"Duplicate model name in catalog: {variant.name!r}")
        catalog[variant.name] = variant
    return MappingProxyType(catalog)


def load_model_catalog_from_csv(csv_path: str | Path | None = None) -> Mapping[str, ModelVariant]:
    """
    Load the model catalog from a CSV file.

    CSV format (list cells are ``|`` separated):
    name,max_context,multimodal,strengths,ideal_use_cases,limitations,features,input_price,output_price
    GPT-4o,128000,true,multimodal|speed,general|qa,weaker_at_long_agentic_coding,vision|streaming,5.00,15.00

    Args:
        csv_path: Path to CSV file. If None, uses MODEL_CATALOG_CSV_PATH from config
            with smart resolution (absolute/relative/filename).

    Returns:
        Read-only mapping of model name to ModelVariant, in file order.

    Raises:
        CatalogError: If the file is missing, lacks columns or holds invalid rows.
    """
    if csv_path is None:
        csv_path = resolve_csv_path(settings.MODEL_CATALOG_CSV_PATH)

    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise CatalogError(f"Model catalog not found: {csv_path}")

    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        missing = [column for column in CATALOG_COLUMNS if column not in (reader.fieldnames or [])]
        if missing:
            raise CatalogError(f"Model catalog {csv_path.name} is missing columns: {', '.join(missing)}")

        # Line 1 is the header
        variants = [_row_to_variant(row, line_number) for line_number, row in enumerate(reader, start=2)]

    if not variants:
        raise CatalogError(f"Model catalog {csv_path.name} holds no models")

    catalog = build_catalog(variants)

    prices = [v.blended_price for v in catalog.values()]
    logger.info(
        f"✅ Loaded {len(catalog)} models from {csv_path.name} "
        f"(blended range: ${min(prices):.2f} - ${max(prices):.2f} per 1M tokens)"
    )
    cheapest = sorted(catalog.values(), key=lambda v: v.blended_price)[:3]
    logger.info(f"💰 Cheapest models: {', '.join(f'{v.name} (${v.blended_price:.2f})' for v in cheapest)}")

    return catalog


# Process-wide catalog, read-only after load
MODEL_CATALOG: Mapping[str, ModelVariant] = load_model_catalog_from_csv()


def get_catalog() -> Mapping[str, ModelVariant]:
    return MODEL_CATALOG


def get_model(name: str) -> ModelVariant | None:
    """Get a model variant by exact name."""
    return MODEL_CATALOG.get(name)


def list_model_names() -> list[str]:
    return list(MODEL_CATALOG.keys())
