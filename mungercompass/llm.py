import re
from typing import Any

import anthropic
from anthropic import Anthropic
from pydantic import ValidationError

from .prompts import Photo, RenderedPrompt

_DATA_URI_RE = re.compile(r"^data:(?P<media_type>[^;,\s]+);base64,(?P<data>\S+)$")


class InvalidRequest(ValueError):
    def __init__(self, operation: str, error: ValidationError):
        self.operation = operation
        self.errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in error.errors()
        ]
        self.fields = [err["loc"] for err in self.errors]
        super().__init__(f"Invalid {operation} request: {', '.join(self.fields) or 'input'}")


class ModelServiceError(Exception):
    def __init__(self, error: str, kind: str):
        super().__init__(f"Model service failure ({kind}): {error}")
        self.error = error
        self.kind = kind


class InvalidModelJSON(ModelServiceError, ValueError):
    def __init__(self, raw_text: str, error: str, kind: str):
        super().__init__(error=error, kind=kind)
        self.raw_text = raw_text


class EmptyModelOutput(InvalidModelJSON):
    def __init__(self):
        super().__init__(
            raw_text="",
            error="No text content found in model response",
            kind="empty_output",
        )


def resolve_client(client: Any | None = None, api_key: str | None = None) -> Any:
    if client is not None:
        return client
    if not api_key:
        raise ModelServiceError("ANTHROPIC_API_KEY is not configured", kind="missing_credential")
    # Retries would mean more than one outbound call per invocation.
    return Anthropic(api_key=api_key, max_retries=0)


def split_data_uri(data_uri: str) -> tuple[str, str]:
    match = _DATA_URI_RE.match(data_uri)
    if match is None:
        raise ValueError("photo must be a data URI of the form data:<mimetype>;base64,<data>")
    return match.group("media_type"), match.group("data")


def image_block(photo: Photo) -> dict[str, Any]:
    media_type, data = split_data_uri(photo.data_uri)
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": media_type, "data": data},
    }


def build_content(prompt: RenderedPrompt) -> list[dict[str, Any]]:
    content = []
    for part in prompt.parts:
        if isinstance(part, Photo):
            content.append(image_block(part))
        elif part:
            content.append({"type": "text", "text": part})
    return content


def create_message(
    client: Any,
    *,
    model: str,
    max_tokens: int,
    temperature: float,
    system: str,
    prompt: RenderedPrompt,
) -> Any:
    try:
        return client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=[{"role": "user", "content": build_content(prompt)}],
        )
    except (anthropic.APIError, ConnectionError, TimeoutError) as e:
        raise ModelServiceError(str(e), kind="transport") from e


def extract_text(resp) -> str:
    parts = []
    for block in resp.content:
        if hasattr(block, "text") and block.text:
            parts.append(block.text)
    raw_text = "".join(parts)
    if not raw_text.strip():
        raise EmptyModelOutput()
    return raw_text.strip()
