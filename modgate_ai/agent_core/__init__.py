"""Agent core: module registry, directive parsing, dispatch, approval gating
and the conversation engine."""

from .factory import build_default_registry, build_policy, build_service
from .service import GatewayService

__all__ = ["GatewayService", "build_default_registry", "build_policy", "build_service"]
