"""IterationEngine — drives the generate / execute tools / generate again cycle."""

import json
import time
from dataclasses import dataclass, field

from agent_loop.config.domain.loop import LoopConfig
from agent_loop.config.domain.provider import ProviderConfig
from agent_loop.config.domain.search import DocumentSearchConfig
from agent_loop.conversation.domain.context import (
    COMPLETION_SENTINEL,
    build_context,
    strip_sentinel,
)
from agent_loop.conversation.domain.turn import (
    ChatMessage,
    ConversationTurn,
    ThoughtPart,
    ToolInvocationPart,
    ToolResultPart,
)
from agent_loop.generation.domain.events import (
    FunctionCall,
    Text,
    ThinkingBlock,
    Thought,
)
from agent_loop.generation.domain.model import GenerationModel, GenerationModelFactory
from agent_loop.generation.infrastructure.errors import GenerationError
from agent_loop.loop.application.aggregator import StepOutcome, aggregate
from agent_loop.loop.domain.observer import LoopObserver
from agent_loop.loop.domain.progress import ProgressEvent, ProgressSink, ProgressType
from agent_loop.loop.domain.result import AgenticResult
from agent_loop.loop.domain.state import LoopState
from agent_loop.loop.domain.step import IterationStep, ToolCallRecord
from agent_loop.tools.application.toolbox import Toolbox
from agent_loop.tools.domain.connection import ConnectionPool
from agent_loop.tools.domain.observer import ConnectorObserver
from agent_loop.tools.infrastructure.errors import ToolExecutionError

FALLBACK_RESPONSE = "Unable to complete the task."

_STEP_THOUGHT_SEPARATOR = "\n\n"

_CONTINUE_PROMPT = (
    f"Continue working on the task. When it is complete, end your response "
    f"with: {COMPLETION_SENTINEL}"
)


@dataclass
class _Generation:
    """What one streamed completion produced, split by event kind."""

    thoughts: list[str] = field(default_factory=list)
    blocks: list[dict[str, object]] = field(default_factory=list)
    text: str = ""
    calls: list[FunctionCall] = field(default_factory=list)


class _GuardedSink:
    """Wraps an optional ProgressSink so that a failing sink never stops the loop."""

    def __init__(self, sink: ProgressSink | None, observer: LoopObserver) -> None:
        self._sink = sink
        self._observer = observer

    def emit(
        self,
        event_type: ProgressType,
        iteration: int,
        content: str,
        tool_name: str | None = None,
    ) -> None:
        if self._sink is None:
            return
        try:
            self._sink.emit(
                ProgressEvent(
                    type=event_type,
                    iteration=iteration,
                    content=content,
                    tool_name=tool_name,
                )
            )
        except Exception as exc:
            self._observer.loop_progress_sink_failed(
                event_type=event_type, reason=str(exc)
            )


class IterationEngine:
    """Runs the agentic loop for one conversation.

    The engine holds no per-request state: the connection pool is shared and
    owned by the caller, and everything else lives for the duration of `run`.
    `run` never raises; every failure ends up inside the returned result.
    """

    def __init__(
        self,
        model_factory: GenerationModelFactory,
        pool: ConnectionPool,
        observer: LoopObserver,
        connector_observer: ConnectorObserver,
    ) -> None:
        self._model_factory = model_factory
        self._pool = pool
        self._observer = observer
        self._connector_observer = connector_observer

    async def run(
        self,
        messages: list[ChatMessage],
        config: LoopConfig,
        provider_configs: list[ProviderConfig],
        progress_sink: ProgressSink | None = None,
        search: DocumentSearchConfig | None = None,
    ) -> AgenticResult:
        sink = _GuardedSink(sink=progress_sink, observer=self._observer)
        toolbox = await Toolbox.assemble(
            pool=self._pool,
            provider_configs=provider_configs,
            observer=self._connector_observer,
            call_timeout_seconds=config.tool_call_timeout_seconds,
        )
        model = self._model_factory.create(config)
        active_search = search if search is not None and search.enabled else None
        turns = build_context(messages=messages, system_prompt=config.system_prompt)

        self._observer.loop_started(
            model=config.model_id,
            max_iterations=config.max_iterations,
            num_tools=len(toolbox.declarations),
            num_connections=toolbox.num_connections,
            num_messages=len(messages),
        )

        state = LoopState.RUNNING
        iteration = 0
        outcomes: list[StepOutcome] = []
        final_response = ""
        best_response = ""

        while state is LoopState.RUNNING and iteration < config.max_iterations:
            iteration += 1
            self._observer.loop_iteration_started(iteration=iteration)
            sink.emit(
                "iteration_start",
                iteration,
                f"Iteration {iteration}: AI is thinking...",
            )

            generation = _Generation()
            try:
                await self._generate(
                    model=model,
                    turns=turns,
                    toolbox=toolbox,
                    search=active_search,
                    iteration=iteration,
                    sink=sink,
                    into=generation,
                )
            except GenerationError as exc:
                self._observer.loop_generation_failed(
                    iteration=iteration, reason=exc.reason
                )
                final_response = f"Error in iteration {iteration}: {exc.reason}"
                outcomes.append(
                    StepOutcome(
                        step=IterationStep(
                            iteration=iteration,
                            thoughts=_join_step_thoughts(generation.thoughts),
                            response=final_response,
                        ),
                        thought_fragments=generation.thoughts,
                    )
                )
                state = LoopState.FAILED
                break

            if generation.calls:
                state = LoopState.AWAITING_TOOLS
                records: list[ToolCallRecord] = []
                for call in generation.calls:
                    records.append(
                        await self._execute(
                            toolbox=toolbox, call=call, iteration=iteration, sink=sink
                        )
                    )
                turns = [*turns, *_tool_round_turns(generation, records)]
                outcomes.append(
                    StepOutcome(
                        step=IterationStep(
                            iteration=iteration,
                            thoughts=_join_step_thoughts(generation.thoughts),
                            tool_calls=records,
                        ),
                        thought_fragments=generation.thoughts,
                    )
                )
                state = LoopState.RUNNING
            else:
                response, had_sentinel = strip_sentinel(generation.text)
                outcomes.append(
                    StepOutcome(
                        step=IterationStep(
                            iteration=iteration,
                            thoughts=_join_step_thoughts(generation.thoughts),
                            response=response,
                        ),
                        thought_fragments=generation.thoughts,
                    )
                )
                sink.emit("response", iteration, response)
                if response:
                    best_response = response

                if had_sentinel or (
                    response and not config.require_completion_sentinel
                ):
                    final_response = response
                    state = LoopState.DONE
                elif response:
                    turns = [
                        *turns,
                        ConversationTurn.text(role="model", text=generation.text),
                        ConversationTurn.text(role="user", text=_CONTINUE_PROMPT),
                    ]

            sink.emit("step_complete", iteration, f"Step {iteration} complete")

        if state is LoopState.RUNNING:
            self._observer.loop_budget_exhausted(max_iterations=config.max_iterations)

        result = aggregate(
            outcomes=outcomes,
            final_response=final_response or best_response or FALLBACK_RESPONSE,
            total_iterations=iteration,
        )
        self._observer.loop_completed(
            state=state.value,
            total_iterations=iteration,
            num_tool_calls=len(result.all_tool_calls),
        )
        return result

    async def _generate(
        self,
        model: GenerationModel,
        turns: list[ConversationTurn],
        toolbox: Toolbox,
        search: DocumentSearchConfig | None,
        iteration: int,
        sink: _GuardedSink,
        into: _Generation,
    ) -> None:
        """Consume one completion stream into `into`, forwarding thoughts as progress.

        Raises:
            GenerationError: for any failure of the stream, whatever its type.
        """
        try:
            async for event in model.stream(
                turns=turns, tools=toolbox.tool_payload(), search=search
            ):
                match event:
                    case Thought(text=text):
                        into.thoughts.append(text)
                        sink.emit("thinking", iteration, text)
                    case ThinkingBlock(block=block):
                        into.blocks.append(block)
                    case Text(text=text):
                        into.text += text
                    case FunctionCall():
                        into.calls.append(event)
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(reason=str(exc) or type(exc).__name__) from exc

    async def _execute(
        self,
        toolbox: Toolbox,
        call: FunctionCall,
        iteration: int,
        sink: _GuardedSink,
    ) -> ToolCallRecord:
        """Run one tool call; failures become an error record, never an exception."""
        sink.emit("tool_start", iteration, f"Calling tool: {call.name}", call.name)

        started = time.monotonic()
        try:
            result = await toolbox.execute(name=call.name, args=call.args)
        except ToolExecutionError as exc:
            output = json.dumps({"error": exc.reason})
            status = "error"
        else:
            status = "error" if result.is_error else "success"
            output = result.text or _empty_output(status)
        duration_ms = max(0, int((time.monotonic() - started) * 1000))

        record = ToolCallRecord(
            tool_name=call.name,
            tool_input=json.dumps(call.args, indent=2, default=str),
            tool_output=output,
            execution_time_ms=duration_ms,
            status=status,
        )

        self._observer.loop_tool_completed(
            iteration=iteration,
            tool_name=call.name,
            status=status,
            duration_ms=duration_ms,
        )
        sink.emit(
            "tool_end",
            iteration,
            f"Tool {call.name} completed ({duration_ms}ms)",
            call.name,
        )
        return record


def _join_step_thoughts(fragments: list[str]) -> str | None:
    return _STEP_THOUGHT_SEPARATOR.join(fragments) if fragments else None


def _empty_output(status: str) -> str:
    if status == "error":
        return json.dumps({"error": "tool reported an error without output"})
    return json.dumps({"result": ""})


def _tool_round_turns(
    generation: _Generation, records: list[ToolCallRecord]
) -> list[ConversationTurn]:
    """The model's invocation turn followed by the synthetic turn carrying results."""
    invocation_parts: list[ThoughtPart | ToolInvocationPart] = [
        ThoughtPart(text=thought) for thought in generation.thoughts
    ]
    invocation_parts.extend(
        ThoughtPart(text=str(block.get("thinking", "")), block=block)
        for block in generation.blocks
    )
    invocation_parts.extend(
        ToolInvocationPart(
            call_id=call.call_id,
            name=call.name,
            args=call.args,
            provider_fields=call.provider_fields,
        )
        for call in generation.calls
    )
    result_parts = [
        ToolResultPart(call_id=call.call_id, name=call.name, output=record.tool_output)
        for call, record in zip(generation.calls, records, strict=True)
    ]
    return [
        ConversationTurn(role="model", parts=invocation_parts),
        ConversationTurn(role="user", parts=result_parts),
    ]
