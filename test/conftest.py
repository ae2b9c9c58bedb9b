from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

import httpx
import pytest

# Load dotenv files early so test fixtures can read secrets via os.getenv
try:  # pragma: no cover
    from dotenv import load_dotenv

    TEST_ROOT = Path(__file__).resolve().parent
    # Load test/.env first, then fallback to test/.env.example for defaults
    load_dotenv(TEST_ROOT / ".env", override=False)
    load_dotenv(TEST_ROOT / ".env.example", override=False)
except Exception:
    pass


class ScriptedModel:
    """``ModelClient`` replaying a fixed sequence of replies.

    Every call is recorded as ``(prompt, system_prompt, prior_tool_output)``.
    The last reply is repeated once the script is exhausted.
    """

    def __init__(self, replies: Sequence[str]) -> None:
        self._replies = list(replies)
        self.calls: List[tuple[str, str, Optional[str]]] = []

    async def generate(self, prompt: str, system_prompt: str, prior_tool_output: Optional[str] = None) -> str:
        self.calls.append((prompt, system_prompt, prior_tool_output))
        idx = min(len(self.calls) - 1, len(self._replies) - 1)
        return self._replies[idx]


@pytest.fixture
def scripted_model() -> Callable[..., ScriptedModel]:
    """Factory fixture: ``scripted_model("reply 1", "reply 2")``."""

    def _make(*replies: str) -> ScriptedModel:
        return ScriptedModel(replies)

    return _make


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
