from .engine import SYSTEM_PROMPT, ConversationEngine, render_tool_outputs
from .models import EngineDeps

__all__ = ["ConversationEngine", "EngineDeps", "SYSTEM_PROMPT", "render_tool_outputs"]
