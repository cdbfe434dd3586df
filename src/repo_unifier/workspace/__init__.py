"""Project workspace wiring."""

from repo_unifier.workspace.project import ProjectWorkspace

__all__ = ["ProjectWorkspace"]
