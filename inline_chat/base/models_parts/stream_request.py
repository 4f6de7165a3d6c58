"""
StreamRequest DTO: one immutable request per session invocation.

``to_payload`` renders the exact chat-completions body sent on the wire: a
system message, a user message, and ``stream: true``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class StreamRequest:
    """Normalized streaming chat request.

    Attributes:
        model_id: Target model identifier (non-empty).
        system_prompt: System message content; may be empty.
        user_content: User message content (selection or whole document); may be empty.
    """

    model_id: str
    system_prompt: str
    user_content: str

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-serializable request body."""
        return {
            "model": self.model_id,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": self.user_content},
            ],
            "stream": True,
        }


__all__ = ["StreamRequest"]
