from mungercompass.models import AlternativesQuery, ImageAnalysisQuery, PurchaseQuery
from mungercompass.prompts import (
    Photo,
    render_alternatives,
    render_image_analysis,
    render_munger_analysis,
)

SCHEMA = '{"type":"object","required":["recommendation"]}'


def test_munger_prompt_omits_absent_optional_fields():
    query = PurchaseQuery.model_validate({"itemName": "Standing Desk", "cost": 500})

    prompt = render_munger_analysis(query, SCHEMA)

    assert "Item Name: Standing Desk" in prompt.text
    assert "Cost: $500.00" in prompt.text
    assert "Purpose:" not in prompt.text
    assert "Frequency of Use:" not in prompt.text
    assert "Item Image" not in prompt.text
    assert "financial situation" not in prompt.text
    assert prompt.photos == []


def test_munger_prompt_renders_present_fields():
    query = PurchaseQuery.model_validate(
        {
            "itemName": "Standing Desk",
            "cost": 1234.5,
            "purpose": "Working from home",
            "frequency": "Daily",
        }
    )

    text = render_munger_analysis(query, SCHEMA).text

    assert "Cost: $1,234.50" in text
    assert "Purpose: Working from home" in text
    assert "Frequency of Use: Daily" in text


def test_profile_section_only_lists_given_values():
    query = PurchaseQuery.model_validate({"itemName": "TV", "cost": 800, "income": 4000, "riskTolerance": "low"})

    text = render_munger_analysis(query, SCHEMA).text

    assert "Consider the user's financial situation:" in text
    assert "Monthly Income: $4,000.00" in text
    assert "Risk Tolerance: low" in text
    assert "Monthly Expenses" not in text
    assert "Total Savings" not in text


def test_zero_savings_is_still_rendered():
    query = PurchaseQuery.model_validate({"itemName": "TV", "cost": 800, "savings": 0})

    assert "Total Savings: $0.00" in render_munger_analysis(query, SCHEMA).text


def test_photo_is_placed_after_its_label(photo_uri):
    query = PurchaseQuery.model_validate({"itemName": "Lamp", "cost": 40, "photo": photo_uri})

    prompt = render_munger_analysis(query, SCHEMA)

    index = prompt.parts.index(Photo(photo_uri))
    assert prompt.parts[index - 1].rstrip().endswith("Item Image:")
    assert isinstance(prompt.parts[index + 1], str)
    assert photo_uri not in prompt.text


def test_prompt_embeds_schema_and_field_labels():
    query = PurchaseQuery.model_validate({"itemName": "Lamp", "cost": 40})

    text = render_munger_analysis(query, SCHEMA).text

    assert SCHEMA in text
    for label in ("Recommendation", "Reasoning", "Opportunity Cost", "Financial Impact", "Key Insights"):
        assert f"{label} (" in text
    assert "Buy or Don't Buy" in text


def test_rendering_is_deterministic(photo_uri):
    query = ImageAnalysisQuery.model_validate({"itemName": "Lamp", "cost": 40, "photo": photo_uri})

    assert render_image_analysis(query, SCHEMA) == render_image_analysis(query, SCHEMA)


def test_image_prompt_asks_for_item_description(photo_uri):
    query = ImageAnalysisQuery.model_validate({"itemName": "Lamp", "cost": 40, "photo": photo_uri})

    prompt = render_image_analysis(query, SCHEMA)

    assert prompt.photos == [Photo(photo_uri)]
    assert "Item Description (itemDescription)" in prompt.text
    assert "Image:" in prompt.text


def test_alternatives_prompt(photo_uri):
    query = AlternativesQuery.model_validate({"itemName": "Luxury Watch", "photo": photo_uri})

    prompt = render_alternatives(query, SCHEMA)

    assert "Item Name: Luxury Watch" in prompt.text
    assert "cheaper than the original item" in prompt.text
    assert prompt.photos == [Photo(photo_uri)]
    assert SCHEMA in prompt.text
