"""
Gateway API Endpoints.

- ``GET /``: service banner with the number of available modules.
- ``GET /modules``: identifiers of the available modules.
- ``POST /message``: run a conversation for a user prompt.
- ``POST /approve-module``: approve or deny a pending module invocation.

Conversation and approval failures are reported in the body as
``{success: false, message}`` with status 200; only request validation errors
change the status code.
"""

from fastapi import APIRouter

from modgate_ai.server.schemas import (
    ApproveModuleRequest,
    GatewayResponse,
    MessageRequest,
    ModulesResponse,
    RootResponse,
)
from modgate_ai.server.services.deps import OrchestratorDep

router = APIRouter()


@router.get(
    "/",
    response_model=RootResponse,
    summary="Service Banner",
    description="Confirm the gateway is running and report how many modules are available.",
)
async def root(orchestrator: OrchestratorDep):
    return RootResponse(message="ModGate-AI gateway is running", modules=len(orchestrator.module_ids()))


@router.get(
    "/modules",
    response_model=ModulesResponse,
    summary="List Modules",
    description="Return the identifiers of every available module.",
)
async def list_modules(orchestrator: OrchestratorDep):
    return ModulesResponse(modules=orchestrator.module_ids())


@router.post(
    "/message",
    response_model=GatewayResponse,
    response_model_exclude_none=True,
    summary="Send Message",
    description="Submit a user prompt. The model may run modules; untrusted modules pause for approval.",
    response_description="Final answer, approval request or failure.",
)
async def message(body: MessageRequest, orchestrator: OrchestratorDep):
    """
    Run the tool-invocation loop for ``body.userprompt``.

    When the model asks for a module that needs approval the response carries
    ``requiresApproval`` and a ``requestId`` to pass to ``/approve-module``.
    """
    return await orchestrator.handle_message(body.userprompt, body.typoftask)


@router.post(
    "/approve-module",
    response_model=GatewayResponse,
    response_model_exclude_none=True,
    summary="Approve or Deny Module",
    description="Decide on a pending module invocation. Each requestId can be decided once.",
    response_description="Denial notice, resumed conversation result, or failure.",
)
async def approve_module(body: ApproveModuleRequest, orchestrator: OrchestratorDep):
    """
    Apply an approval decision.

    Approving runs the module and resumes the conversation, which may end in a
    final answer or in another approval request.
    """
    return await orchestrator.approve_module(body.request_id, body.approved)
