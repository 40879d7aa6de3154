"""Claude AI client for Chapter Master."""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

from anthropic import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncAnthropic,
    InternalServerError,
    RateLimitError,
)
from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import Config
from ..core.elements import describe_validation_error
from ..exceptions import ExternalServiceDegraded, ExternalServiceFailed

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)

# Errors worth another attempt; anything else fails at once
TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class GenerationService(Protocol):
    """What the story tools need from a language model."""

    async def generate_text(self, prompt: str, role: str = "main", system: str = "") -> str:
        ...

    async def generate_object(self, prompt: str, role: str, schema: Type[S], schema_name: str) -> S:
        ...


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    text = text.strip()
    match = _FENCE.match(text)
    return match.group(1) if match else text


def parse_object(text: str, schema: Type[S], schema_name: str) -> S:
    """Parse a model reply into ``schema`` or raise ExternalServiceDegraded."""
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise ExternalServiceDegraded(f"{schema_name} reply is not valid JSON: {e}") from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ExternalServiceDegraded(
            f"{schema_name} reply does not match its schema: {describe_validation_error(e)}"
        ) from e


class ClaudeClient:
    """Client for interacting with Claude AI API."""

    def __init__(self, config: Config):
        """Initialize Claude client with async support."""
        if not config.api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable or api_key setting is required")

        self.config = config
        self.client = AsyncAnthropic(api_key=config.api_key, timeout=config.request_timeout)

    async def _make_request(self, messages: List[Dict[str, str]], role: str, system: str = "") -> str:
        """Make a request to Claude API with retry logic."""
        model = self.config.model_for(role)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.config.max_retries),
                wait=wait_exponential(multiplier=1, min=4, max=10),
                retry=retry_if_exception_type(TRANSIENT_ERRORS),
                reraise=True,
            ):
                with attempt:
                    kwargs: Dict[str, Any] = {
                        "model": model,
                        "max_tokens": self.config.max_tokens_for(role),
                        "messages": messages,
                    }
                    if system:
                        kwargs["system"] = system
                    response = await self.client.messages.create(**kwargs)
        except APIError as e:
            logger.error(f"API request failed: {e}")
            raise ExternalServiceFailed(f"Generation request to {model} failed: {e}") from e

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    async def generate_text(self, prompt: str, role: str = "main", system: str = "") -> str:
        """Generate free text for a prompt."""
        messages = [{"role": "user", "content": prompt}]
        return await self._make_request(messages, role, system)

    async def generate_object(self, prompt: str, role: str, schema: Type[S], schema_name: str) -> S:
        """Generate a JSON object and validate it against ``schema``."""
        json_schema = json.dumps(schema.model_json_schema(by_alias=True), indent=2)
        system = f"""You produce structured data for a story planning tool.

Reply with a single JSON object named {schema_name} that matches this JSON Schema:
{json_schema}

Respond with the JSON object only, without commentary."""

        text = await self.generate_text(prompt, role=role, system=system)
        return parse_object(text, schema, schema_name)


def build_generation_service(config: Config) -> Optional[ClaudeClient]:
    """Create the Claude client, or None when no API key is configured."""
    if not config.api_key:
        logger.info("No ANTHROPIC_API_KEY configured; AI features are disabled")
        return None
    return ClaudeClient(config)
