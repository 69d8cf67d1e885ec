from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from .config import Settings
from .flows import Flow, FlowResult
from .models import (
    AlternativesQuery,
    AlternativesResult,
    ImageAnalysisQuery,
    ImageRecommendation,
    PurchaseQuery,
    Recommendation,
)
from .prompts import (
    MUNGER_SYSTEM_PROMPT,
    SHOPPING_SYSTEM_PROMPT,
    render_alternatives,
    render_image_analysis,
    render_munger_analysis,
)

IMAGE_ANALYSIS = Flow(
    name="image_analysis",
    input_model=ImageAnalysisQuery,
    output_model=ImageRecommendation,
    system_prompt=MUNGER_SYSTEM_PROMPT,
    render=render_image_analysis,
)

MUNGER_ANALYSIS = Flow(
    name="munger_style_analysis",
    input_model=PurchaseQuery,
    output_model=Recommendation,
    system_prompt=MUNGER_SYSTEM_PROMPT,
    render=render_munger_analysis,
)

CHEAPER_ALTERNATIVES = Flow(
    name="cheaper_alternatives",
    input_model=AlternativesQuery,
    output_model=AlternativesResult,
    system_prompt=SHOPPING_SYSTEM_PROMPT,
    render=render_alternatives,
)


def analyze_image(
    query: Mapping[str, Any] | BaseModel,
    *,
    client: Any | None = None,
    api_key: str | None = None,
    settings: Settings | None = None,
) -> FlowResult[ImageRecommendation]:
    """Describe the photographed item and give Munger-style purchase advice."""
    return IMAGE_ANALYSIS.run(query, client=client, api_key=api_key, settings=settings)


def munger_style_analysis(
    query: Mapping[str, Any] | BaseModel,
    *,
    client: Any | None = None,
    api_key: str | None = None,
    settings: Settings | None = None,
) -> FlowResult[Recommendation]:
    """Buy / Don't Buy verdict with reasoning, weighed against the optional financial profile."""
    return MUNGER_ANALYSIS.run(query, client=client, api_key=api_key, settings=settings)


def find_cheaper_alternatives(
    query: Mapping[str, Any] | BaseModel,
    *,
    client: Any | None = None,
    api_key: str | None = None,
    settings: Settings | None = None,
) -> FlowResult[AlternativesResult]:
    return CHEAPER_ALTERNATIVES.run(query, client=client, api_key=api_key, settings=settings)
