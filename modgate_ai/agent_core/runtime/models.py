from __future__ import annotations

"""Runtime dependency bundle and LangGraph state types.

- ``EngineDeps`` collects the collaborators the conversation engine needs.
- ``_GraphState`` is the state passed between LangGraph nodes for one
  conversation (one original user prompt and the chain it triggers).
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, TypedDict

from ..approvals import ApprovalWorkflow
from ..model_provider import ModelClient
from ..parsing import CommandParser
from ..registry import ModuleRegistry
from ..schemas.domain import ConversationOutcome, InvocationIntent, ToolOutput


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``ConversationEngine``.

    ``registry`` is optional; when present its module catalogue is included in
    the system instruction sent to the model.
    """

    model: ModelClient
    workflow: ApprovalWorkflow
    parser: CommandParser = field(default_factory=CommandParser)
    registry: Optional[ModuleRegistry] = None


class _GraphState(TypedDict, total=False):
    """Mutable LangGraph state for a single conversation.

    - ``prompt``: the original user prompt.
    - ``tool_outputs``: every executed invocation, in production order.
    - ``depth``: number of tool calls executed so far.
    - ``reply``: the latest model reply.
    - ``intent``: the directive parsed from ``reply`` (None when final).
    - ``module_result``: result of the invocation approved externally, if any.
    - ``outcome``: terminal outcome, set by the last node.
    """

    prompt: str
    tool_outputs: List[ToolOutput]
    depth: int
    reply: str
    intent: Optional[InvocationIntent]
    module_result: Any
    error: Optional[str]
    outcome: ConversationOutcome
