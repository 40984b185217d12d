"""Azure OpenAI completion invoker.

One request, one response. Retries are disabled here (including
the SDK's built-in retries); resilience belongs to the orchestrator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import openai
from openai import AsyncAzureOpenAI

from designetica import config
from designetica.settings import AI_MAX_TOKENS, AI_REQUEST_TIMEOUT, AI_TEMPERATURE

from .prompt import Prompt

logger = logging.getLogger("designetica.generation.invoker")

AI_SOURCE = "azure-openai"

_PLACEHOLDER_VALUES = {"", "your-key-here", "your-endpoint-here", "placeholder"}


class AINotConfiguredError(Exception):
    """Raised when Azure OpenAI endpoint or key is missing."""


class AIInvocationError(Exception):
    """Raised when the completion call fails or returns no content."""


@dataclass(frozen=True)
class ModelConfig:
    endpoint: str
    api_key: str
    deployment: str
    api_version: str
    max_tokens: int = AI_MAX_TOKENS
    temperature: float = AI_TEMPERATURE
    timeout: float = AI_REQUEST_TIMEOUT

    @classmethod
    def from_env(cls) -> "ModelConfig":
        return cls(
            endpoint=config.AZURE_OPENAI_ENDPOINT,
            api_key=config.AZURE_OPENAI_KEY,
            deployment=config.AZURE_OPENAI_DEPLOYMENT,
            api_version=config.AZURE_OPENAI_API_VERSION,
        )

    @property
    def is_configured(self) -> bool:
        return (
            self.endpoint.strip().lower() not in _PLACEHOLDER_VALUES
            and self.api_key.strip().lower() not in _PLACEHOLDER_VALUES
        )


class AIInvoker:
    """Talks to the completion API exactly once per ``invoke`` call.

    Args:
        model_config: Endpoint/deployment settings. Defaults to env config.
        client: Pre-built SDK client (tests pass a mock).
    """

    def __init__(
        self,
        model_config: Optional[ModelConfig] = None,
        client: Optional[AsyncAzureOpenAI] = None,
    ):
        self.model_config = model_config or ModelConfig.from_env()
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.model_config.is_configured

    def _get_client(self) -> AsyncAzureOpenAI:
        if self._client is None:
            if not self.model_config.is_configured:
                raise AINotConfiguredError(
                    "Azure OpenAI is not configured. Set AZURE_OPENAI_ENDPOINT and "
                    "AZURE_OPENAI_KEY (or AZURE_OPENAI_API_KEY)."
                )
            self._client = AsyncAzureOpenAI(
                api_key=self.model_config.api_key,
                api_version=self.model_config.api_version,
                azure_endpoint=self.model_config.endpoint.rstrip("/"),
                timeout=self.model_config.timeout,
                max_retries=0,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def invoke(self, prompt: Prompt, max_tokens: Optional[int] = None) -> str:
        """Send the prompt and return the raw completion text.

        Raises:
            AINotConfiguredError: credentials missing.
            AIInvocationError: network/HTTP failure or empty content.
        """
        client = self._get_client()
        cfg = self.model_config
        try:
            resp = await client.chat.completions.create(
                model=cfg.deployment,
                messages=prompt.to_messages(),
                max_tokens=max_tokens or cfg.max_tokens,
                temperature=cfg.temperature,
            )
        except openai.APITimeoutError as e:
            raise AIInvocationError(f"Azure OpenAI request timed out after {cfg.timeout}s") from e
        except openai.APIStatusError as e:
            raise AIInvocationError(
                f"Azure OpenAI returned HTTP {e.status_code}: {str(e)[:200]}"
            ) from e
        except openai.OpenAIError as e:
            raise AIInvocationError(f"Azure OpenAI request failed: {e}") from e

        choices = getattr(resp, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise AIInvocationError("Azure OpenAI returned an empty completion")

        usage = getattr(resp, "usage", None)
        if usage is not None:
            logger.info(
                f"invoke: deployment={cfg.deployment}, "
                f"tokens={getattr(usage, 'total_tokens', '?')}, chars={len(content)}"
            )
        return content
