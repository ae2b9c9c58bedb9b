"""
Orchestrator Dependency.

Provides the singleton OrchestratorService to API endpoints.
"""

from typing import Annotated

from fastapi import Depends

from modgate_ai.server.services.orchestrator import (
    OrchestratorService,
    get_orchestrator,
)

OrchestratorDep = Annotated[OrchestratorService, Depends(get_orchestrator)]
