"""AI integration modules for Chapter Master."""

from .claude_client import ClaudeClient, GenerationService, build_generation_service
from .enrichment import Degraded, Enriched, enrich

__all__ = [
    "ClaudeClient",
    "GenerationService",
    "build_generation_service",
    "Degraded",
    "Enriched",
    "enrich",
]
