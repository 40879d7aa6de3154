"""Optional AI enrichment of baseline story elements.

Enrichment never fails an operation. Every call returns either
``Enriched`` carrying the validated shape or ``Degraded`` carrying the
reason, and call sites branch on the two explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from ..exceptions import ExternalServiceDegraded, ExternalServiceFailed
from .claude_client import GenerationService

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)


@dataclass(frozen=True)
class Enriched(Generic[S]):
    value: S


@dataclass(frozen=True)
class Degraded:
    reason: str


EnrichmentResult = Union[Enriched[S], Degraded]


async def enrich(
    service: Optional[GenerationService],
    prompt: str,
    schema: Type[S],
    schema_name: str,
    role: str = "main",
) -> "EnrichmentResult[S]":
    """Ask the generation service for ``schema``, degrading on any failure."""
    if service is None:
        return Degraded("AI generation is not available")

    try:
        value = await service.generate_object(prompt, role=role, schema=schema, schema_name=schema_name)
    except (ExternalServiceDegraded, ExternalServiceFailed) as e:
        logger.warning(f"{schema_name} enrichment failed, continuing without it: {e}")
        return Degraded(str(e))

    return Enriched(value)
