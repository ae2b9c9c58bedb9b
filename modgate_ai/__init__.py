"""ModGate-AI.

This package contains a conversational module gateway: a language model is
asked whether answering a user request requires running a local *module*
(a capability plugin). If it does, the gateway runs the module command, feeds
the result back to the model and repeats until the model produces a final
answer.

High-level architecture
-----------------------

- ``modgate_ai.agent_core``:

  - ``registry``: discovers plugin sources and loads module descriptors.
  - ``parsing``: extracts a ``run module <module> <command>`` directive from
    free-form model text.
  - ``dispatch``: runs one module command and normalizes the outcome into an
    ``InvocationResult`` envelope.
  - ``policy`` / ``approvals``: auto-approve trusted modules, otherwise park the
    invocation in a pending store until a human decides.
  - ``runtime``: the LangGraph orchestration loop alternating between model
    replies and module invocations.

- ``modgate_ai.plugins``: built-in modules (list, math, string, crypto, file,
  network, system, websearch).

- ``modgate_ai.server``: the FastAPI HTTP surface.

Typical workflow
----------------

1. ``POST /message`` submits a prompt; the model may answer directly or emit an
   invocation directive.
2. Trusted modules run immediately and their output is fed back to the model.
3. Any other module pauses the conversation and returns a ``requestId``.
4. ``POST /approve-module`` approves or denies the pending invocation; an
   approval runs the command and resumes the loop.
"""
