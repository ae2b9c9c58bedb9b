from __future__ import annotations

"""LangGraph conversation engine.

``ConversationEngine`` drives the tool-invocation loop for one user prompt.

Graph
-----

::

    generate -> inspect -> execute -> generate    (trusted module, chain continues)
                        -> pause                  (approval required)
                        -> limit                  (chain depth exhausted)
                        -> finish                 (no directive, or provider failure)

- ``generate`` asks the model for a reply given the original prompt and the
  ordered history of every tool output produced so far.
- ``inspect`` parses the reply for a directive.
- ``execute`` hands the intent to the ``ApprovalWorkflow``. Trusted modules run
  immediately and their output is appended to the history.
- ``pause`` stops the loop and reports the pending request id.

Resume
------

After an approval executes, ``resume`` re-enters the graph at ``generate``
with the stored conversation state plus the new tool output, so the model
always sees the complete history.
"""

import json
import logging
from typing import Any, List, Optional

from langgraph.graph import END, StateGraph

from ..errors import ProviderError
from ..schemas.domain import (
    ApprovalState,
    ConversationOutcome,
    ConversationStatus,
    ErrorKind,
    PendingInvocation,
    ToolOutput,
)
from .models import EngineDeps, _GraphState

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an assistant that can use local modules to answer the user.

To run a module command, reply with a directive on its own:

    /run module <module_id> <command_name>/

or, when the command takes arguments, append a JSON object:

    /run module <module_id> <command_name> {"arg": "value"}/

Rules:
- Emit at most one directive per reply. Only the first directive is honored.
- Only use modules and commands listed below.
- After a directive runs you receive its output and may run another one.
- When you have everything you need, answer in plain text without a directive.
- Some modules need human approval; if a request is denied, do not retry it.
"""


def render_tool_outputs(outputs: List[ToolOutput]) -> str:
    """Render tool outputs oldest first, one block per invocation."""
    blocks = []
    for i, out in enumerate(outputs, start=1):
        if out.result.ok:
            body = json.dumps(out.result.result, default=str, ensure_ascii=False)
        else:
            body = f"ERROR {out.result.error_kind.value if out.result.error_kind else ''}: {out.result.message}"
        args = f" {json.dumps(out.args, default=str)}" if out.args else ""
        blocks.append(f"[{i}] {out.module}.{out.command}{args}\n{body}")
    return "\n\n".join(blocks)


def module_result_of(output: ToolOutput) -> Any:
    """Value surfaced to HTTP callers for an executed invocation."""
    if output.result.ok:
        return output.result.result
    return output.result.model_dump(mode="json", exclude_none=True)


class ConversationEngine:
    """Run the bounded generate/inspect/execute loop for a conversation."""

    def __init__(self, *, deps: EngineDeps, max_chain_depth: int = 8) -> None:
        self._deps = deps
        self._max_depth = max_chain_depth
        self._graph = self._build_graph()

    @property
    def max_chain_depth(self) -> int:
        return self._max_depth

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("generate", self._node_generate)
        g.add_node("inspect", self._node_inspect)
        g.add_node("execute", self._node_execute)
        g.add_node("pause", self._node_pause)
        g.add_node("limit", self._node_limit)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("generate")
        g.add_edge("generate", "inspect")
        g.add_conditional_edges(
            "inspect",
            self._route_after_inspect,
            {"execute": "execute", "limit": "limit", "finish": "finish"},
        )
        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {"generate": "generate", "pause": "pause"},
        )
        g.add_edge("pause", END)
        g.add_edge("limit", END)
        g.add_edge("finish", END)
        return g.compile()

    def system_prompt(self) -> str:
        """System instruction plus the catalogue of available modules."""
        registry = self._deps.registry
        if registry is None:
            return SYSTEM_PROMPT
        lines = ["Available modules:"]
        for info in registry.describe():
            if info.get("error"):
                continue
            for name, cmd in info["commands"].items():
                args = cmd.get("args")
                arg_text = f" args: {', '.join(args)}" if args else ""
                lines.append(f"- {info['id']} {name}: {cmd['description']}{arg_text}")
        return f"{SYSTEM_PROMPT}\n" + "\n".join(lines)

    async def converse(self, prompt: str) -> ConversationOutcome:
        """Run a new conversation for ``prompt``."""
        state: _GraphState = {"prompt": prompt, "tool_outputs": [], "depth": 0}
        return await self._run(state)

    async def resume(self, pending: PendingInvocation, output: ToolOutput) -> ConversationOutcome:
        """
        Continue a conversation after its pending invocation was executed.

        Args:
            pending: The consumed pending invocation (carries prompt and history).
            output: The tool output produced by the approved invocation.
        """
        state: _GraphState = {
            "prompt": pending.original_prompt,
            "tool_outputs": [*pending.prior_results, output],
            "depth": pending.depth + 1,
            "module_result": module_result_of(output),
        }
        return await self._run(state)

    async def _run(self, state: _GraphState) -> ConversationOutcome:
        # Each chained call walks generate -> inspect -> execute.
        limit = 3 * (self._max_depth + 2) + 5
        final = await self._graph.ainvoke(state, config={"recursion_limit": limit})
        return final["outcome"]

    async def _node_generate(self, state: _GraphState) -> dict[str, Any]:
        history = render_tool_outputs(list(state.get("tool_outputs") or []))
        try:
            reply = await self._deps.model.generate(state["prompt"], self.system_prompt(), history or None)
        except ProviderError as e:
            return {"reply": "", "error": str(e)}
        logger.debug(f"Model replied ({len(reply)} chars) at depth {state.get('depth', 0)}")
        return {"reply": reply, "error": None}

    async def _node_inspect(self, state: _GraphState) -> dict[str, Any]:
        if state.get("error"):
            return {"intent": None}
        return {"intent": self._deps.parser.parse(state.get("reply") or "")}

    def _route_after_inspect(self, state: _GraphState) -> str:
        if state.get("intent") is None:
            return "finish"
        if int(state.get("depth") or 0) >= self._max_depth:
            return "limit"
        return "execute"

    async def _node_execute(self, state: _GraphState) -> dict[str, Any]:
        intent = state["intent"]
        assert intent is not None
        outputs = list(state.get("tool_outputs") or [])
        depth = int(state.get("depth") or 0)

        proposal = await self._deps.workflow.propose(
            intent,
            original_prompt=state["prompt"],
            last_model_reply=state.get("reply") or "",
            prior_results=outputs,
            depth=depth,
        )
        if proposal.state == ApprovalState.awaiting_approval:
            return {"outcome": self._approval_required(proposal.pending, outputs)}

        assert proposal.result is not None
        outputs.append(ToolOutput(module=intent.module, command=intent.command, args=intent.args, result=proposal.result))
        return {"tool_outputs": outputs, "depth": depth + 1, "intent": None}

    def _route_after_execute(self, state: _GraphState) -> str:
        return "pause" if state.get("outcome") is not None else "generate"

    def _approval_required(self, pending: Optional[PendingInvocation], outputs: List[ToolOutput]) -> ConversationOutcome:
        assert pending is not None
        return ConversationOutcome(
            status=ConversationStatus.approval_required,
            message=f"Module '{pending.module}' command '{pending.command}' requires approval.",
            request_id=pending.request_id,
            module=pending.module,
            command=pending.command,
            tool_outputs=outputs,
        )

    async def _node_pause(self, state: _GraphState) -> dict[str, Any]:
        outcome = state["outcome"]
        logger.info(f"Conversation paused awaiting approval {outcome.request_id}")
        if state.get("module_result") is not None:
            outcome = outcome.model_copy(update={"module_result": state["module_result"]})
        return {"outcome": outcome}

    async def _node_limit(self, state: _GraphState) -> dict[str, Any]:
        logger.warning(f"Chain limit of {self._max_depth} tool calls reached; stopping conversation")
        outcome = ConversationOutcome(
            status=ConversationStatus.failed,
            message=f"Tool call chain limit of {self._max_depth} exceeded",
            error_kind=ErrorKind.chain_limit_exceeded,
            module_result=state.get("module_result"),
            tool_outputs=list(state.get("tool_outputs") or []),
        )
        return {"outcome": outcome}

    async def _node_finish(self, state: _GraphState) -> dict[str, Any]:
        outputs = list(state.get("tool_outputs") or [])
        error = state.get("error")
        if error:
            outcome = ConversationOutcome(
                status=ConversationStatus.failed,
                message=error,
                error_kind=ErrorKind.provider_error,
                module_result=state.get("module_result"),
                tool_outputs=outputs,
            )
        else:
            outcome = ConversationOutcome(
                status=ConversationStatus.completed,
                message=state.get("reply") or "",
                module_result=state.get("module_result"),
                tool_outputs=outputs,
            )
        return {"outcome": outcome}
