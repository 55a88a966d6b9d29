"""Conversation context builder — seeds the turn list with the operating directive.

The generation call is given turns only, with no separate system slot, so the
directive travels as a synthetic user turn acknowledged by a synthetic model
turn, ahead of the real history.
"""

from agent_loop.conversation.domain.turn import ChatMessage, ConversationTurn

COMPLETION_SENTINEL = "[TASK_COMPLETE]"

OPERATING_DIRECTIVE = f"""\
You are an AI agent with planning and reasoning capabilities. When given a task:

1. **Plan**: Break down the task into clear, actionable steps
2. **Execute**: Use available tools to complete each step
3. **Reason**: Analyze results and adjust your approach if needed
4. **Report**: Provide status updates and explain your actions

Guidelines:
- Always think step-by-step before taking action
- Use tools when you need external information or capabilities
- If a step fails, try alternative approaches
- Signal completion by providing a comprehensive final answer
- Be concise but thorough in your responses

When your task is COMPLETE, end your response with: {COMPLETION_SENTINEL}"""

_ACKNOWLEDGEMENT = "I understand and will follow these instructions."


def combine_directive(system_prompt: str | None) -> str:
    """Prefix the agent persona, if any, to the fixed operating directive."""
    if system_prompt:
        return f"{system_prompt}\n\n{OPERATING_DIRECTIVE}"
    return OPERATING_DIRECTIVE


def build_context(
    messages: list[ChatMessage], system_prompt: str | None = None
) -> list[ConversationTurn]:
    directive = combine_directive(system_prompt)
    turns = [
        ConversationTurn.text(
            role="user",
            text=f"System Instructions: {directive}\n\nPlease follow these instructions.",
        ),
        ConversationTurn.text(role="model", text=_ACKNOWLEDGEMENT),
    ]
    for message in messages:
        role = "user" if message.role == "user" else "model"
        turns.append(ConversationTurn.text(role=role, text=message.content))
    return turns


def strip_sentinel(text: str) -> tuple[str, bool]:
    """Remove the first completion sentinel and trim. Returns (text, had_sentinel)."""
    if COMPLETION_SENTINEL not in text:
        return text, False
    return text.replace(COMPLETION_SENTINEL, "", 1).strip(), True
