"""Merge agent that rebuilds a complete file from a partial AI suggestion."""

import logging
import os
from typing import Literal

from anthropic import Anthropic
import openai

from repo_unifier.agents.exceptions import (
    AgentError,
    ProviderConfigError,
    ReconstructionError,
)
from repo_unifier.agents.prompts import DEFAULT_MERGE_PROMPT, build_merge_message
from repo_unifier.utils.diff_generator import detect_code_style

logger = logging.getLogger(__name__)

# Constants
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
MAX_FILE_SIZE = 200_000  # Max chars of original content sent to the model
MAX_API_TOKENS = 16384  # Max tokens for the rewritten file

Provider = Literal["anthropic", "openai", "auto"]


class MergeAgent:
    """Reconstructs a full file body via the Anthropic or OpenAI API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        llm_provider: str = "auto",
        llm_fallback_provider: str | None = None,
        allow_fallback: bool = False,
        system_prompt: str | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
            model: Model ID to use for the rewrite.
            llm_provider: "auto", "anthropic" or "openai".
            llm_fallback_provider: Provider tried when the primary one fails.
            allow_fallback: Whether the fallback provider may be used.
            system_prompt: Replaces the default merge instructions.

        Raises:
            ProviderConfigError: If no API key is found.
        """
        self.model: str = model
        self.api_key: str | None = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
        self.system_prompt: str = system_prompt or DEFAULT_MERGE_PROMPT
        self.llm_provider: Provider = "auto"
        self.llm_fallback_provider: Provider | None = None
        self.allow_fallback: bool = False
        self._anthropic_client: Anthropic | None = None
        self._openai_client: openai.OpenAI | None = None

        if self.api_key:
            self._anthropic_client = Anthropic(api_key=self.api_key)
        if self.openai_api_key:
            self._openai_client = openai.OpenAI(api_key=self.openai_api_key)

        if not (self._anthropic_client or self._openai_client):
            raise ProviderConfigError(
                "No Anthropic or OpenAI API key found. "
                "Provide via parameter, ANTHROPIC_API_KEY or OPENAI_API_KEY env vars."
            )
        self.set_provider_config(
            llm_provider=llm_provider,
            llm_fallback_provider=llm_fallback_provider,
            allow_fallback=allow_fallback,
        )

    def _normalize_provider(self, value: str) -> Provider:
        if value not in {"auto", "anthropic", "openai"}:
            raise ProviderConfigError(f"Unsupported provider: {value}")
        return value  # type: ignore[return-value]

    def set_provider_config(
        self,
        llm_provider: str = "auto",
        llm_fallback_provider: str | None = None,
        allow_fallback: bool = False,
    ) -> None:
        self.llm_provider = self._normalize_provider(llm_provider)
        self.llm_fallback_provider = (
            self._normalize_provider(llm_fallback_provider)
            if llm_fallback_provider
            else None
        )
        self.allow_fallback = bool(allow_fallback)

        if self.llm_provider == "anthropic" and self._anthropic_client is None:
            raise ProviderConfigError(
                "No Anthropic API key found for --llm-provider=anthropic."
            )
        if self.llm_provider == "openai" and self._openai_client is None:
            raise ProviderConfigError("No OpenAI API key found for --llm-provider=openai.")
        if self.allow_fallback and self.llm_fallback_provider:
            if self.llm_fallback_provider == "anthropic" and self._anthropic_client is None:
                raise ProviderConfigError(
                    "Fallback provider requested as anthropic but ANTHROPIC_API_KEY is not set."
                )
            if self.llm_fallback_provider == "openai" and self._openai_client is None:
                raise ProviderConfigError(
                    "Fallback provider requested as openai but OPENAI_API_KEY is not set."
                )

    def _primary_provider(self) -> Literal["anthropic", "openai"]:
        if self.llm_provider == "auto":
            if self._anthropic_client is not None:
                return "anthropic"
            return "openai"
        return self.llm_provider

    def _resolve_model(self, provider: str) -> str:
        if provider == "openai" and self.model.startswith("claude-"):
            return DEFAULT_OPENAI_MODEL
        return self.model

    def _provider_chain(self) -> list[str]:
        chain: list[str] = [self._primary_provider()]
        if self.allow_fallback and self.llm_fallback_provider:
            fallback = self.llm_fallback_provider
            if fallback not in ("auto", chain[0]):
                chain.append(fallback)
        return chain

    def rewrite(self, original_content: str, proposed_fragment: str, path: str) -> str:
        """Return the complete file after applying ``proposed_fragment``.

        Args:
            original_content: Current content of the file.
            proposed_fragment: Suggested change, possibly covering only part
                of the file.
            path: Relative path of the file, used in the prompt and errors.

        Returns:
            The full reconstructed file body as plain text.

        Raises:
            ReconstructionError: If every provider fails or the model returns
                nothing usable.
        """
        if len(original_content) > MAX_FILE_SIZE:
            raise ReconstructionError(
                path,
                f"file exceeds MAX_FILE_SIZE ({len(original_content)} > {MAX_FILE_SIZE} characters)",
            )
        if not proposed_fragment.strip():
            raise ReconstructionError(path, "the suggested change is empty")

        style = detect_code_style(original_content)
        message = build_merge_message(path, original_content, proposed_fragment, style)

        text: str | None = None
        last_error: Exception | None = None
        # The chain only holds a second provider when fallback is allowed
        for provider in self._provider_chain():
            try:
                if provider == "anthropic":
                    text = self._call_anthropic(message)
                else:
                    text = self._call_openai(message)
                break
            except Exception as error:
                last_error = error
                logger.warning(
                    "Merge call for %s failed on %s: %s", path, provider, error
                )

        if text is None:
            raise ReconstructionError(path, f"LLM call failed: {last_error}") from last_error

        body = strip_code_fences(text)
        if not body.strip():
            raise ReconstructionError(path, "the model returned an empty file")
        if original_content.endswith("\n") and not body.endswith("\n"):
            body += "\n"
        return body

    def _call_anthropic(self, message: str) -> str:
        if not self._anthropic_client:
            raise AgentError("Anthropic client unavailable")
        response = self._anthropic_client.messages.create(
            model=self._resolve_model("anthropic"),
            max_tokens=MAX_API_TOKENS,
            system=self.system_prompt,
            messages=[{"role": "user", "content": message}],
        )
        return "".join(
            block.text for block in response.content if block.type == "text"
        )

    def _call_openai(self, message: str) -> str:
        if not self._openai_client:
            raise AgentError("OpenAI client unavailable")
        response = self._openai_client.chat.completions.create(
            model=self._resolve_model("openai"),
            max_tokens=MAX_API_TOKENS,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": message},
            ],
        )
        return response.choices[0].message.content or ""


def strip_code_fences(text: str) -> str:
    """Remove one enclosing markdown fence if the model added it anyway."""
    stripped = text.strip("\n")
    lines = stripped.split("\n")
    if len(lines) >= 2 and lines[0].startswith("```") and lines[-1].strip() == "```":
        return "\n".join(lines[1:-1])
    return text
