import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich import print
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .analyzer import analyze_image, find_cheaper_alternatives, munger_style_analysis
from .config import Settings, load_settings, warn_if_missing_api_key
from .llm import InvalidRequest, ModelServiceError
from .models import AlternativesResult, ImageRecommendation, Recommendation

MAX_PHOTO_BYTES = 4 * 1024 * 1024
SUPPORTED_MEDIA_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}

app = typer.Typer(help="Charlie Munger's rational advice on your purchasing decisions.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    """Munger's Compass CLI entrypoint."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)
    warn_if_missing_api_key(settings)
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit(code=0)


def _read_photo(photo: Path) -> str:
    if not photo.exists():
        print("[red]Photo not found[/red]")
        raise typer.Exit(code=1)
    data = photo.read_bytes()
    if len(data) > MAX_PHOTO_BYTES:
        print("[red]Image too large.[/red] Please upload an image smaller than 4MB.")
        raise typer.Exit(code=1)
    media_type, _ = mimetypes.guess_type(photo.name)
    if media_type not in SUPPORTED_MEDIA_TYPES:
        print("[red]Unsupported file type.[/red] Please upload a PNG, JPEG, GIF or WebP image.")
        raise typer.Exit(code=1)
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def _purchase_payload(item: str, cost: float, **optional: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"item_name": item, "cost": cost}
    payload.update({key: value for key, value in optional.items() if value is not None})
    return payload


def _handle_invalid_request(exc: InvalidRequest) -> NoReturn:
    print("[red]Missing or invalid information.[/red]")
    for error in exc.errors:
        print(f"- {escape(error['loc'])}: {escape(error['msg'])}")
    raise typer.Exit(code=2)


def _handle_service_error(exc: ModelServiceError, title: str) -> NoReturn:
    failure_messages = {
        "json_decode": "Model returned invalid JSON",
        "schema_validation": "Model returned JSON that didn't match schema",
        "empty_output": "Model returned empty output",
        "transport": "Could not reach the model service",
        "missing_credential": "ANTHROPIC_API_KEY not found in environment",
    }
    message = failure_messages.get(exc.kind, "Model call failed")
    print(f"[red]{title}.[/red] {message}.")
    raise typer.Exit(code=1)


def _print_recommendation(result: Recommendation) -> None:
    print(f"[bold]Munger's Verdict: {escape(result.recommendation)}[/bold]")
    print(f"\n[bold]Reasoning[/bold]\n{escape(result.reasoning)}")
    print(f"\n[bold]Opportunity Cost[/bold]\n{escape(result.opportunity_cost)}")
    print(f"\n[bold]Financial Impact[/bold]\n{escape(result.financial_impact)}")
    print(f"\n[bold]Key Insights & Behavioral Traps[/bold]\n{escape(result.key_insights)}")
    if result.alternatives:
        print(f"\n[bold]Alternatives[/bold]\n{escape(result.alternatives)}")


def _print_image_recommendation(result: ImageRecommendation) -> None:
    print(f"[bold]Item[/bold]\n{escape(result.item_description)}\n")
    print(f"[bold]Munger's Verdict: {escape(result.recommendation)}[/bold]")
    print(f"\n[bold]Reasoning[/bold]\n{escape(result.reasoning)}")
    print(f"\n[bold]Opportunity Cost[/bold]\n{escape(result.opportunity_cost)}")
    print("\n[bold]Financial Impact[/bold]")
    print(f"Short term: {escape(result.financial_impact.short_term)}")
    print(f"Long term: {escape(result.financial_impact.long_term)}")
    print(f"\n[bold]Key Insights & Behavioral Traps[/bold]\n{escape(result.key_insights)}")
    if result.alternatives:
        print("\n[bold]Alternatives[/bold]")
        for i, alternative in enumerate(result.alternatives, 1):
            print(f"{i}. {escape(alternative)}")


def _print_alternatives(result: AlternativesResult) -> None:
    if not result.alternatives:
        print("No cheaper alternatives found.")
        return
    table = Table(title="Cheaper Alternatives")
    table.add_column("Item")
    table.add_column("Price", justify="right")
    table.add_column("Link")
    for alternative in result.alternatives:
        table.add_row(escape(alternative.name), f"${alternative.price:,.2f}", escape(alternative.url))
    print(table)


@app.command()
def advise(
    ctx: typer.Context,
    item: str = typer.Argument(..., help="The name of the item."),
    cost: float = typer.Option(..., "--cost", help="The cost of the item in dollars."),
    purpose: Optional[str] = typer.Option(None, "--purpose"),
    frequency: Optional[str] = typer.Option(
        None, "--frequency", help="Daily, Weekly, Monthly, Rarely or One-time."
    ),
    photo: Optional[Path] = typer.Option(None, "--photo", help="Optional photo of the item."),
    income: Optional[float] = typer.Option(None, "--income", help="Monthly income."),
    expenses: Optional[float] = typer.Option(None, "--expenses", help="Monthly expenses."),
    savings: Optional[float] = typer.Option(None, "--savings", help="Total savings."),
    risk_tolerance: Optional[str] = typer.Option(None, "--risk-tolerance", help="low, medium or high."),
):
    """Get a Buy / Don't Buy verdict on a purchase."""
    settings: Settings = ctx.obj
    payload = _purchase_payload(
        item,
        cost,
        purpose=purpose,
        frequency=frequency,
        photo=_read_photo(photo) if photo else None,
        income=income,
        expenses=expenses,
        savings=savings,
        risk_tolerance=risk_tolerance,
    )

    try:
        result = munger_style_analysis(payload, settings=settings)
    except InvalidRequest as exc:
        _handle_invalid_request(exc)
    except ModelServiceError as exc:
        _handle_service_error(exc, "Analysis Failed")

    _print_recommendation(result.output)


@app.command("analyze-image")
def analyze_image_command(
    ctx: typer.Context,
    item: str = typer.Argument(..., help="The name of the item."),
    photo: Path = typer.Argument(..., help="Photo of the item."),
    cost: float = typer.Option(..., "--cost", help="The cost of the item in dollars."),
    purpose: Optional[str] = typer.Option(None, "--purpose"),
    frequency: Optional[str] = typer.Option(
        None, "--frequency", help="Daily, Weekly, Monthly, Rarely or One-time."
    ),
):
    """Identify the item in a photo and get purchase advice on it."""
    settings: Settings = ctx.obj
    payload = _purchase_payload(
        item,
        cost,
        purpose=purpose,
        frequency=frequency,
        photo=_read_photo(photo),
    )

    try:
        result = analyze_image(payload, settings=settings)
    except InvalidRequest as exc:
        _handle_invalid_request(exc)
    except ModelServiceError as exc:
        _handle_service_error(exc, "Analysis Failed")

    _print_image_recommendation(result.output)


@app.command()
def alternatives(
    ctx: typer.Context,
    item: str = typer.Argument(..., help="The name of the item."),
    photo: Path = typer.Argument(..., help="Photo of the item."),
):
    """Find cheaper alternatives for a photographed item."""
    settings: Settings = ctx.obj
    payload = {"item_name": item, "photo": _read_photo(photo)}

    try:
        result = find_cheaper_alternatives(payload, settings=settings)
    except InvalidRequest as exc:
        _handle_invalid_request(exc)
    except ModelServiceError as exc:
        _handle_service_error(exc, "Search Failed")

    _print_alternatives(result.output)


if __name__ == "__main__":
    app()
