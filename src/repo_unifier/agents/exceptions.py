"""Exceptions for agent operations."""


class AgentError(Exception):
    """Base exception for all agent operations."""


class ProviderConfigError(AgentError):
    """Raised when no usable LLM provider is configured."""


class ReconstructionError(AgentError):
    """Raised when the rewrite model fails to return a complete file."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Could not reconstruct '{path}': {message}")
        self.path = path
        self.message = message
