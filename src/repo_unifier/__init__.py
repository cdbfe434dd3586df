"""Repo unifier: pack a source tree into AI context and review AI rewrites."""

__version__ = "0.1.0"
