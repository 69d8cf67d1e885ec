from dataclasses import dataclass, field
from typing import Optional, Union

from .models import AlternativesQuery, ImageAnalysisQuery, PurchaseDetails, PurchaseQuery

MUNGER_SYSTEM_PROMPT = """
You are Charlie Munger, a wise and rational financial advisor.

You judge purchases using these lenses:
1) Opportunity cost: what else the money could compound into
2) Rational thinking over impulse and social proof
3) Long-term financial health over short-term comfort
4) Behavioral economics traps (anchoring, sunk cost, envy, consistency bias)

Be blunt, concrete and brief. Avoid vague advice.
"""

SHOPPING_SYSTEM_PROMPT = """
You are a helpful, frugal shopping assistant that finds cheaper alternatives for items online.

Be mindful of the opportunity cost and rational decision-making in your suggestions.
"""

JSON_RULES = """
Return ONLY valid, compact JSON (no markdown, no explanations, no trailing text).

Required schema (JSON Schema, use its camelCase keys exactly):
{schema}

Hard rules (MUST follow):
- Output MUST be a single JSON object starting with '{{' and ending with '}}'.
- Output MUST be valid JSON only (no code fences, no commentary).
- Every required key MUST be present with a non-empty value.
- Do NOT use quotes inside strings unless escaped.
"""

MUNGER_INSTRUCTIONS = """
Analyze the purchase, considering opportunity cost, rational thinking, and long-term financial impact. \
Provide a clear recommendation (Buy or Don't Buy) and explain your reasoning. \
Suggest cheaper alternatives if available. \
Analyze how the purchase affects the user's financial health and provide key insights and \
behavioral economics observations related to the purchase.

Map your answer onto these fields:
Recommendation (recommendation): [Buy/Don't Buy]
Reasoning (reasoning): [Your reasoning here]
Opportunity Cost (opportunityCost): [Analysis of opportunity cost]
Alternatives (alternatives): [Suggested cheaper alternatives, if any; omit the key if none]
Financial Impact (financialImpact): [How the purchase affects the user's financial health]
Key Insights (keyInsights): [Key insights and behavioral economics observations]
"""

IMAGE_INSTRUCTIONS = """
Consider the opportunity cost, financial impact, and behavioral economics principles. \
First, provide a short description of the item in the image, based only on what the image shows, \
and then provide your Munger style analysis.

Map your answer onto these fields:
Item Description (itemDescription): [What the photo shows]
Recommendation (recommendation): [Buy/Don't Buy]
Reasoning (reasoning): [Your reasoning here]
Opportunity Cost (opportunityCost): [Analysis of opportunity cost]
Alternatives (alternatives): [List of cheaper alternative suggestions, may be empty]
Financial Impact (financialImpact): [shortTerm and longTerm impact]
Key Insights (keyInsights): [Key insights and behavioral economics observations]
"""

ALTERNATIVES_INSTRUCTIONS = """
Given the item name and an image of the item, find at least three cheaper alternatives sold online.
Return a list of alternatives with their name, URL, and price in dollars.
Ensure that you only suggest alternatives that are cheaper than the original item.
"""


@dataclass(frozen=True)
class Photo:
    data_uri: str


@dataclass(frozen=True)
class RenderedPrompt:
    parts: tuple[Union[str, Photo], ...]

    @property
    def text(self) -> str:
        return "".join(part for part in self.parts if isinstance(part, str))

    @property
    def photos(self) -> list[Photo]:
        return [part for part in self.parts if isinstance(part, Photo)]


@dataclass
class PromptBuilder:
    """Accumulates prompt lines; absent optional values produce no line."""

    parts: list = field(default_factory=list)
    lines: list = field(default_factory=list)

    def text(self, text: str) -> "PromptBuilder":
        self.lines.append(text.strip("\n"))
        return self

    def labeled(self, label: str, value) -> "PromptBuilder":
        if value is None or (isinstance(value, str) and not value.strip()):
            return self
        self.lines.append(f"{label}: {value}")
        return self

    def photo(self, label: str, data_uri: Optional[str]) -> "PromptBuilder":
        if data_uri is None:
            return self
        self.lines.append(f"{label}:")
        self._flush()
        self.parts.append(Photo(data_uri))
        return self

    def _flush(self) -> None:
        if self.lines:
            self.parts.append("\n".join(self.lines) + "\n")
            self.lines = []

    def build(self) -> RenderedPrompt:
        self._flush()
        return RenderedPrompt(parts=tuple(self.parts))


def _money(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    return f"${value:,.2f}"


def _purchase_lines(builder: PromptBuilder, query: PurchaseDetails) -> None:
    builder.labeled("Item Name", query.item_name)
    builder.labeled("Cost", _money(query.cost))
    builder.labeled("Purpose", query.purpose)
    builder.labeled("Frequency of Use", query.frequency)


def _profile_lines(builder: PromptBuilder, query: PurchaseDetails) -> None:
    profile = [
        ("Monthly Income", _money(query.income)),
        ("Monthly Expenses", _money(query.expenses)),
        ("Total Savings", _money(query.savings)),
        ("Risk Tolerance", query.risk_tolerance),
    ]
    present = [(label, value) for label, value in profile if value is not None and str(value).strip()]
    if not present:
        return
    builder.text("")
    builder.text("Consider the user's financial situation:")
    for label, value in present:
        builder.labeled(label, value)


def render_munger_analysis(query: PurchaseQuery, schema: str) -> RenderedPrompt:
    builder = PromptBuilder()
    builder.text("A user is considering purchasing the following item:")
    builder.text("")
    _purchase_lines(builder, query)
    builder.photo("Item Image", query.photo)
    _profile_lines(builder, query)
    builder.text(MUNGER_INSTRUCTIONS)
    builder.text(JSON_RULES.format(schema=schema))
    return builder.build()


def render_image_analysis(query: ImageAnalysisQuery, schema: str) -> RenderedPrompt:
    builder = PromptBuilder()
    builder.text("Analyze the following purchase decision and provide a recommendation.")
    builder.text("")
    _purchase_lines(builder, query)
    builder.photo("Image", query.photo)
    _profile_lines(builder, query)
    builder.text(IMAGE_INSTRUCTIONS)
    builder.text(JSON_RULES.format(schema=schema))
    return builder.build()


def render_alternatives(query: AlternativesQuery, schema: str) -> RenderedPrompt:
    builder = PromptBuilder()
    builder.text(ALTERNATIVES_INSTRUCTIONS)
    builder.text("")
    builder.labeled("Item Name", query.item_name)
    builder.photo("Item Image", query.photo)
    builder.text(JSON_RULES.format(schema=schema))
    return builder.build()
