"""LiteLLMGenerationModel — streaming completions with tools via LiteLLM."""

import json
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import litellm

from agent_loop.config.domain.loop import LoopConfig
from agent_loop.config.domain.search import DocumentSearchConfig
from agent_loop.conversation.domain.turn import ConversationTurn
from agent_loop.generation.domain.events import (
    FunctionCall,
    StreamEvent,
    Text,
    ThinkingBlock,
    Thought,
)
from agent_loop.generation.domain.observer import GenerationObserver
from agent_loop.generation.infrastructure.errors import GenerationError
from agent_loop.generation.infrastructure.messages import render_messages

_SEARCH_UNSUPPORTED_REASON = (
    "chat completions accept only function tools; "
    "a document-search store would be dropped or rejected by the provider"
)


@dataclass
class _PendingFunctionCall:
    """Tool call fragments accumulated across stream chunks for one index."""

    call_id: str = ""
    name: str = ""
    arguments: str = ""
    provider_fields: dict[str, object] | None = None


class LiteLLMGenerationModel:
    """Generation backend that delegates to any model LiteLLM can reach.

    Reasoning deltas (`reasoning_content`) become Thought events, content
    deltas become Text events. Signed reasoning blocks become ThinkingBlock
    events so they can be replayed on the next request. Tool calls arrive in
    pieces (name first, arguments spread over several chunks) and are only
    yielded as complete FunctionCall events once the stream has ended.

    Only function tools are sent. LiteLLM's chat route has no request shape
    that carries a managed document-search store, so an enabled store is
    reported once through the observer and left off the request.
    """

    def __init__(self, config: LoopConfig, observer: GenerationObserver) -> None:
        litellm.suppress_debug_info = True
        self._config = config
        self._observer = observer
        self._reported_stores: set[str] = set()

    async def stream(
        self,
        turns: list[ConversationTurn],
        tools: list[dict[str, object]],
        search: DocumentSearchConfig | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Stream one completion as Thought/ThinkingBlock/Text/FunctionCall events.

        Raises:
            GenerationError: if the call cannot be opened or the stream breaks.
        """
        if search is not None and search.enabled:
            self._report_unsupported_search(search)

        request = self._build_request(turns=turns, tools=tools)
        try:
            response = await litellm.acompletion(**request)
        except Exception as exc:
            raise GenerationError(reason=str(exc) or type(exc).__name__) from exc

        pending: dict[int, _PendingFunctionCall] = {}
        try:
            async for chunk in response:
                for event in _chunk_events(chunk=chunk, pending=pending):
                    yield event
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(reason=str(exc) or type(exc).__name__) from exc

        for idx in sorted(pending):
            yield _complete(pending[idx])

    def _report_unsupported_search(self, search: DocumentSearchConfig) -> None:
        if search.store_name in self._reported_stores:
            return
        self._reported_stores.add(search.store_name)
        self._observer.generation_search_unsupported(
            model=self._config.model_id,
            store_name=search.store_name,
            reason=_SEARCH_UNSUPPORTED_REASON,
        )

    def _build_request(
        self,
        turns: list[ConversationTurn],
        tools: list[dict[str, object]],
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self._config.model_id,
            "messages": render_messages(turns),
            "stream": True,
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_output_tokens,
            "drop_params": True,
        }
        if self._config.credential:
            request["api_key"] = self._config.credential
        if self._config.thinking_budget > 0:
            request["thinking"] = {
                "type": "enabled",
                "budget_tokens": self._config.thinking_budget,
            }
        if tools:
            request["tools"] = list(tools)
        return request


def _chunk_events(
    chunk: Any, pending: dict[int, _PendingFunctionCall]
) -> list[StreamEvent]:
    """Classify one stream chunk, folding tool call deltas into `pending`."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return []
    delta = getattr(choices[0], "delta", None)
    if delta is None:
        return []

    events: list[StreamEvent] = []

    reasoning = getattr(delta, "reasoning_content", None)
    if reasoning:
        events.append(Thought(text=reasoning))

    # Unsigned blocks are streaming fragments of the reasoning text above.
    blocks = getattr(delta, "thinking_blocks", None)
    if isinstance(blocks, list):
        for block in blocks:
            if _is_replayable(block):
                events.append(ThinkingBlock(block=dict(block)))

    content = getattr(delta, "content", None)
    if content:
        events.append(Text(text=content))

    for tc_delta in getattr(delta, "tool_calls", None) or []:
        idx = getattr(tc_delta, "index", None)
        if idx is None:
            idx = 0
        call = pending.setdefault(idx, _PendingFunctionCall())
        if getattr(tc_delta, "id", None):
            call.call_id = tc_delta.id
        function = getattr(tc_delta, "function", None)
        fields = _provider_fields(tc_delta) or _provider_fields(function)
        if fields:
            call.provider_fields = {**(call.provider_fields or {}), **fields}
        if function is None:
            continue
        if getattr(function, "name", None):
            call.name = function.name
        if getattr(function, "arguments", None):
            call.arguments += function.arguments

    return events


def _is_replayable(block: object) -> bool:
    if not isinstance(block, dict):
        return False
    if block.get("type") == "redacted_thinking":
        return bool(block.get("data"))
    return bool(block.get("signature"))


def _provider_fields(source: object) -> dict[str, object] | None:
    fields = getattr(source, "provider_specific_fields", None)
    return dict(fields) if isinstance(fields, dict) and fields else None


def _complete(call: _PendingFunctionCall) -> FunctionCall:
    try:
        parsed = json.loads(call.arguments) if call.arguments else {}
    except json.JSONDecodeError:
        parsed = {"raw": call.arguments}
    args = parsed if isinstance(parsed, dict) else {"value": parsed}
    return FunctionCall(
        call_id=call.call_id or f"call_{uuid.uuid4().hex[:8]}",
        name=call.name,
        args=args,
        provider_fields=call.provider_fields,
    )


class LiteLLMGenerationModelFactory:
    """Creates LiteLLMGenerationModel instances for a given LoopConfig."""

    def __init__(self, observer: GenerationObserver) -> None:
        self._observer = observer

    def create(self, config: LoopConfig) -> LiteLLMGenerationModel:
        return LiteLLMGenerationModel(config=config, observer=self._observer)
