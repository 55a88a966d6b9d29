"""Render ConversationTurns into chat-completion messages.

Plain thought text is never sent back to the model; signed reasoning blocks
are, as `thinking_blocks` on the assistant message that carries the tool
calls they led to. A model turn carrying tool invocations becomes one
assistant message with `tool_calls`; a turn carrying tool results becomes one
`tool` message per result, in invocation order.
"""

import json
from typing import Any

from agent_loop.conversation.domain.turn import (
    ConversationTurn,
    TextPart,
    ThoughtPart,
    ToolInvocationPart,
    ToolResultPart,
)


def render_messages(turns: list[ConversationTurn]) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []
    for turn in turns:
        messages.extend(_render_turn(turn))
    return messages


def _render_turn(turn: ConversationTurn) -> list[dict[str, Any]]:
    texts: list[str] = []
    blocks: list[dict[str, object]] = []
    invocations: list[ToolInvocationPart] = []
    results: list[ToolResultPart] = []

    for part in turn.parts:
        match part:
            case TextPart():
                texts.append(part.text)
            case ThoughtPart():
                if part.block is not None:
                    blocks.append(dict(part.block))
            case ToolInvocationPart():
                invocations.append(part)
            case ToolResultPart():
                results.append(part)

    rendered: list[dict[str, Any]] = [
        {
            "role": "tool",
            "tool_call_id": result.call_id,
            "name": result.name,
            "content": result.output,
        }
        for result in results
    ]

    content = "".join(texts)
    if turn.role == "model":
        if invocations:
            message: dict[str, Any] = {
                "role": "assistant",
                "content": content or None,
                "tool_calls": [_render_call(invocation) for invocation in invocations],
            }
            if blocks:
                message["thinking_blocks"] = blocks
            rendered.append(message)
        elif texts:
            rendered.append({"role": "assistant", "content": content})
    elif texts:
        rendered.append({"role": "user", "content": content})

    return rendered


def _render_call(invocation: ToolInvocationPart) -> dict[str, Any]:
    call: dict[str, Any] = {
        "id": invocation.call_id,
        "type": "function",
        "function": {
            "name": invocation.name,
            "arguments": json.dumps(invocation.args),
        },
    }
    if invocation.provider_fields:
        call["provider_specific_fields"] = dict(invocation.provider_fields)
    return call
