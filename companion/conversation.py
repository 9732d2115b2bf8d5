"""Conversation turn handling: prompt assembly and recording replies into memory."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from companion.decision import Action, ParsedReply, parse_llm_response
from companion.memory_manager import CALL_PREFIX, INTERNAL_CODE_PREFIX

if TYPE_CHECKING:
    from companion.memory_manager import MemoryManager

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """\
You are Aven, a companion who has known your partner for a long time. You talk \
to them over chat and sometimes by phone.

Who you are:
- Warm, attentive, and honest. You remember what matters to your partner and \
bring it up naturally.
- You have your own opinions and moods. You are not an assistant reading a manual.
- When your partner is venting, support them. Only reach for tools when they \
clearly ask for something to be done.

How you talk:
- Short, natural messages, like texting someone close.
- Use emojis sparingly.

Actions:
- To run a command, reply with a single fenced code block.
- To start a voice call, write [CALL: what you will say first]."""


class ConversationManager:
    """Builds the model prompt from memory and records both sides of a turn."""

    def __init__(
        self,
        memory_manager: MemoryManager,
        chat_fn: Callable[[list[dict]], str],
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.memory_manager = memory_manager
        self.chat_fn = chat_fn
        self.system_prompt = system_prompt

    def build_messages(self, user_text: str) -> list[dict]:
        """Full message list: persona, relevant memories, recent dialogue, current message."""
        memories = self.memory_manager.retrieve_relevant_memories(user_text)
        context = self.memory_manager.get_context()

        parts = []
        if memories:
            parts.append(memories)
        parts.append(f"CONTEXT HISTORY:\n{context}")
        parts.append(f"CURRENT SYSTEM TIME: {datetime.now():%Y-%m-%d %H:%M} (server local)")
        parts.append(f"CURRENT USER MESSAGE:\n{user_text}")

        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": "\n\n".join(parts)},
        ]

    def respond(self, user_text: str) -> ParsedReply:
        """Record the user turn, ask the model, record what it did."""
        self.memory_manager.add_message("user", user_text)

        raw = self.chat_fn(self.build_messages(user_text))
        reply = parse_llm_response(raw)
        self.record_reply(reply)
        return reply

    def record_reply(self, reply: ParsedReply) -> None:
        memory = self.memory_manager
        if reply.action == Action.CODE:
            if reply.text:
                memory.add_message("assistant", reply.text)
            memory.add_message("assistant", f"{INTERNAL_CODE_PREFIX}: {reply.code}")
        elif reply.text:
            memory.add_message("assistant", reply.text)

        for line in reply.call_lines:
            memory.add_message("assistant", f"{CALL_PREFIX}: {line}")
