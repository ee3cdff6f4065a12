"""Agent-legibility analysis, guardrails and optimization for repositories."""

__version__ = "0.1.0"

__all__ = ["__version__"]
