from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

Frequency = Literal["Daily", "Weekly", "Monthly", "Rarely", "One-time"]

# Envelope only: data:<mimetype>;base64,<data>
DATA_URI_PATTERN = r"^data:[^;,\s]+/[^;,\s]+;base64,\S+$"
_HTTP_URL = TypeAdapter(HttpUrl)


def _check_http_url(value: str) -> str:
    try:
        url = _HTTP_URL.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"not a valid http(s) URL: {value!r}") from exc
    labels = (url.host or "").rstrip(".").split(".")
    if not all(labels):
        raise ValueError(f"URL has no usable host: {value!r}")
    return value


# Checked as HttpUrl but kept exactly as sent.
LinkUrl = Annotated[str, AfterValidator(_check_http_url)]


class RequestModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        strict=True,
        str_strip_whitespace=True,
        revalidate_instances="always",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ReplyModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PurchaseDetails(RequestModel):
    item_name: str = Field(..., min_length=1, description="The name of the item.")
    cost: float = Field(..., ge=0, description="The cost of the item in dollars.")
    purpose: Optional[str] = Field(None, description="The purpose of the item.")
    frequency: Optional[Frequency] = Field(None, description="How often the item will be used.")
    income: Optional[float] = Field(None, ge=0, description="Monthly income of the user.")
    expenses: Optional[float] = Field(None, ge=0, description="Monthly expenses of the user.")
    savings: Optional[float] = Field(None, ge=0, description="Total savings of the user.")
    risk_tolerance: Optional[str] = Field(None, description="Risk tolerance, e.g. low, medium, high.")


class PurchaseQuery(PurchaseDetails):
    cost: float = Field(..., gt=0, description="The cost of the item in dollars.")
    photo: Optional[str] = Field(None, pattern=DATA_URI_PATTERN)


class ImageAnalysisQuery(PurchaseDetails):
    photo: str = Field(..., pattern=DATA_URI_PATTERN)


class AlternativesQuery(RequestModel):
    item_name: str = Field(..., min_length=1)
    photo: str = Field(..., pattern=DATA_URI_PATTERN)


class Recommendation(ReplyModel):
    recommendation: str = Field(..., min_length=1, description="A clear recommendation: Buy or Don't Buy.")
    reasoning: str = Field(..., min_length=1, description="The reasoning behind the recommendation.")
    opportunity_cost: str = Field(..., min_length=1, description="An analysis of the opportunity cost of the purchase.")
    alternatives: Optional[str] = Field(None, description="Suggested cheaper alternatives, if any.")
    financial_impact: str = Field(
        ..., min_length=1, description="How the purchase affects the user's financial health."
    )
    key_insights: str = Field(..., min_length=1, description="Key insights and behavioral economics observations.")


class FinancialImpact(ReplyModel):
    short_term: str = Field(..., min_length=1)
    long_term: str = Field(..., min_length=1)


class ImageRecommendation(ReplyModel):
    item_description: str = Field(
        ..., min_length=1, description="A description of the item identified from the image."
    )
    recommendation: str = Field(..., min_length=1, description="A recommendation on whether to buy the item.")
    reasoning: str = Field(..., min_length=1)
    opportunity_cost: str = Field(..., min_length=1)
    alternatives: List[str] = Field(..., description="Cheaper alternative suggestions.")
    financial_impact: FinancialImpact
    key_insights: str = Field(..., min_length=1)


class Alternative(ReplyModel):
    name: str = Field(..., min_length=1, description="The name of the alternative item.")
    url: LinkUrl = Field(..., description="Where the alternative item can be found.")
    price: float = Field(..., ge=0, description="The price of the alternative item.")


class AlternativesResult(ReplyModel):
    alternatives: List[Alternative] = Field(..., description="Cheaper alternatives found online.")
