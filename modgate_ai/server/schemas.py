"""
API Schemas.

Pydantic models for the request and response bodies of the gateway API.
Field names on the wire are camelCase where the API defines them that way
(``requestId``, ``requiresApproval``, ``moduleResult``).
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageRequest(BaseModel):
    """
    Schema for submitting a user message.

    ``typoftask`` selects the handling path; only ``llm`` is supported.
    """
    userprompt: str = Field(
        ...,
        min_length=1,
        description="The natural-language request of the user.",
        examples=["what modules are available?"],
    )
    typoftask: str = Field(
        default="llm",
        description="Task type. Only 'llm' is supported.",
        examples=["llm"],
    )


class ApproveModuleRequest(BaseModel):
    """
    Schema for deciding on a pending module invocation.
    """
    request_id: str = Field(
        ...,
        alias="requestId",
        min_length=1,
        description="Identifier returned with the approval-required response.",
    )
    approved: bool = Field(..., description="True to run the module, False to deny it.")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"requestId": "Yk3v...", "approved": True}},
    )


class GatewayResponse(BaseModel):
    """
    Response body of ``/message`` and ``/approve-module``.

    Shapes:

    - final answer: ``{success: true, message}``
    - approval needed: ``{success: true, requiresApproval: true, requestId, module, command, message}``
    - denial: ``{success: true, denied: true, message}``
    - executed after approval: ``{success: true, message, moduleResult}``
    - failure: ``{success: false, message}``

    Unset fields are omitted.
    """
    success: bool
    message: str
    requires_approval: Optional[bool] = Field(default=None, alias="requiresApproval")
    request_id: Optional[str] = Field(default=None, alias="requestId")
    module: Optional[str] = None
    command: Optional[str] = None
    denied: Optional[bool] = None
    module_result: Any = Field(default=None, alias="moduleResult")
    error_kind: Optional[str] = Field(default=None, alias="errorKind")

    model_config = ConfigDict(populate_by_name=True)


class RootResponse(BaseModel):
    message: str
    modules: int


class ModulesResponse(BaseModel):
    modules: List[str]
