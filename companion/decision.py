"""Reply parsing: split a model reply into spoken text and side-channel actions."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class Action(Enum):
    RESPOND = "respond"
    CODE = "code"
    CALL = "call"


_CODE_BLOCK_RE = re.compile(r"```(\w*)\n?([\s\S]*?)```")
_CALL_RE = re.compile(r"\[CALL:\s*([^\]]*)\]")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


@dataclass
class ParsedReply:
    action: Action
    text: str  # what the partner sees
    code: str = ""
    language: str = ""
    call_lines: list[str] = field(default_factory=list)


def parse_llm_response(raw: str) -> ParsedReply:
    """Detect a code block or [CALL: ...] markers in the reply.

    With a code block, text is the thought before the block. Call markers
    are stripped from the visible text and returned separately.
    """
    stripped = raw.strip()

    call_lines = [m.strip() for m in _CALL_RE.findall(stripped) if m.strip()]
    if call_lines:
        stripped = _CALL_RE.sub("", stripped).strip()
        logger.info("Reply requests a call: '%s'", call_lines[0][:60])

    match = _CODE_BLOCK_RE.search(stripped)
    if match:
        language = (match.group(1) or "bash").lower().strip()
        logger.info("Reply contains a %s block", language)
        return ParsedReply(
            action=Action.CODE,
            text=stripped[: match.start()].strip(),
            code=match.group(2),
            language=language,
            call_lines=call_lines,
        )

    text = _EXCESS_NEWLINES_RE.sub("\n\n", stripped).strip()
    action = Action.CALL if call_lines else Action.RESPOND
    return ParsedReply(action=action, text=text, call_lines=call_lines)
