"""Generic validate -> render -> call -> validate operation over the model service."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from .config import Settings, load_settings
from .llm import (
    InvalidModelJSON,
    InvalidRequest,
    ModelServiceError,
    create_message,
    extract_text,
    resolve_client,
)
from .prompts import RenderedPrompt

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)


@dataclass(frozen=True)
class FlowResult(Generic[OutputT]):
    output: OutputT
    raw: str


@dataclass(frozen=True)
class Flow(Generic[InputT, OutputT]):
    """One model-backed operation.

    The input schema guards the outbound call, the renderer turns a validated
    query plus the reply schema into a prompt, and the output schema decides
    whether the reply is accepted. Failures are raised, never repaired.
    """

    name: str
    input_model: type[InputT]
    output_model: type[OutputT]
    system_prompt: str
    render: Callable[[InputT, str], RenderedPrompt]

    def output_schema(self) -> str:
        return json.dumps(self.output_model.model_json_schema(by_alias=True), separators=(",", ":"))

    def validate_input(self, payload: Mapping[str, Any] | BaseModel) -> InputT:
        # Query instances are revalidated too; fields may have been reassigned.
        if isinstance(payload, BaseModel) and not isinstance(payload, self.input_model):
            payload = payload.model_dump(exclude_none=True)
        try:
            return self.input_model.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequest(self.name, e) from e

    def parse_reply(self, raw: str) -> OutputT:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidModelJSON(raw_text=raw, error=str(e), kind="json_decode") from e

        try:
            return self.output_model.model_validate(data)
        except ValidationError as e:
            raise InvalidModelJSON(raw_text=raw, error=str(e), kind="schema_validation") from e

    def run(
        self,
        payload: Mapping[str, Any] | BaseModel,
        *,
        client: Any | None = None,
        api_key: str | None = None,
        settings: Settings | None = None,
    ) -> FlowResult[OutputT]:
        query = self.validate_input(payload)

        settings = settings or load_settings()
        resolved_client = resolve_client(client=client, api_key=api_key or settings.api_key)

        prompt = self.render(query, self.output_schema())
        logger.info("Running %s with model %s", self.name, settings.model)

        try:
            resp = create_message(
                resolved_client,
                model=settings.model,
                max_tokens=settings.max_tokens,
                temperature=settings.temperature,
                system=self.system_prompt,
                prompt=prompt,
            )
            raw = extract_text(resp)
            logger.debug("%s raw reply: %s", self.name, raw)
            output = self.parse_reply(raw)
        except ModelServiceError as e:
            logger.warning("%s failed (%s): %s", self.name, e.kind, e.error)
            raise

        return FlowResult(output=output, raw=raw)
