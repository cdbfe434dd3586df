"""Agent components for the repo unifier."""

from repo_unifier.agents.exceptions import (
    AgentError,
    ProviderConfigError,
    ReconstructionError,
)
from repo_unifier.agents.merge_agent import MergeAgent, strip_code_fences

__all__ = [
    "AgentError",
    "MergeAgent",
    "ProviderConfigError",
    "ReconstructionError",
    "strip_code_fences",
]
