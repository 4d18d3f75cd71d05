"""Natural-language summaries of raw command output.

The summarizer is a provider outside the fleet core. Its failures surface as
SummarizerError and are never treated as connection or execution errors.
"""

import json
import logging
from typing import Protocol

import openai

from fleet_mcp.models import OSInfo

logger = logging.getLogger(__name__)

OS_INFO_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Distribution name, e.g. Ubuntu"},
        "platform": {"type": "string", "description": "Kernel/platform, e.g. linux"},
        "version": {"type": "string", "description": "Distribution version"},
        "arch": {"type": "string", "description": "CPU architecture, e.g. x86_64"},
    },
    "required": ["name", "platform", "version", "arch"],
    "additionalProperties": False,
}


class SummarizerError(Exception):
    """The summarization provider failed or returned unusable output."""

    pass


class Summarizer(Protocol):
    """Turns raw command output into text a person can read."""

    async def summarize(self, raw_output: bytes, instructions: str) -> str:
        """Summarize raw command output following ``instructions``."""
        ...

    async def describe_os(self, os_release: bytes, uname: bytes) -> OSInfo:
        """Extract an OS descriptor from ``/etc/os-release`` and ``uname -a``."""
        ...


class OpenAISummarizer:
    """Summarizer backed by the OpenAI chat completions API."""

    def __init__(self, client: openai.AsyncOpenAI, model: str = "gpt-4o") -> None:
        self.client = client
        self.model = model

    @classmethod
    def from_api_key(cls, api_key: str, model: str = "gpt-4o") -> "OpenAISummarizer":
        """Create a summarizer with a fresh client for ``api_key``."""
        return cls(openai.AsyncOpenAI(api_key=api_key), model=model)

    async def summarize(self, raw_output: bytes, instructions: str) -> str:
        content = await self._complete(
            [
                {"role": "system", "content": instructions},
                {"role": "user", "content": _decode(raw_output)},
            ]
        )
        return content.strip()

    async def describe_os(self, os_release: bytes, uname: bytes) -> OSInfo:
        content = await self._complete(
            [
                {
                    "role": "system",
                    "content": (
                        "You are a helpful assistant that summarizes the output of "
                        "the 'cat /etc/os-release' and 'uname -a' commands."
                    ),
                },
                {
                    "role": "user",
                    "content": f"{_decode(os_release)}\n\n{_decode(uname)}",
                },
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "os_info",
                    "description": "OS information",
                    "schema": OS_INFO_SCHEMA,
                    "strict": True,
                },
            },
        )
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise SummarizerError(f"failed to decode OS information: {e}") from e
        if not isinstance(data, dict):
            raise SummarizerError("OS information is not a JSON object")
        return OSInfo.from_dict(data)

    async def _complete(self, messages: list[dict[str, str]], **kwargs: object) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                **kwargs,  # type: ignore[arg-type]
            )
        except openai.OpenAIError as e:
            logger.error("Summarizer request failed: %s", e)
            raise SummarizerError(f"summarizer request failed: {e}") from e

        if not response.choices:
            raise SummarizerError("no choices returned from OpenAI")
        content = response.choices[0].message.content
        if content is None:
            raise SummarizerError("empty response returned from OpenAI")
        return content


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")
