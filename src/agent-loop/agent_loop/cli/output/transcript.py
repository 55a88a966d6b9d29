"""Transcript serialization — summary JSON and per-iteration audit JSONL."""

import json
import time
from pathlib import Path
from typing import Any

from agent_loop.loop.domain.result import AgenticResult
from agent_loop.loop.domain.step import IterationStep, ToolCallRecord

type JsonDict = dict[str, Any]


def build_summary_json(
    result: AgenticResult, config_name: str, model_id: str
) -> JsonDict:
    """Build the summary document for one run.

    Counts are derived from the result; the joined thoughts are included so the
    summary alone is enough to review what the model reasoned about.
    """
    return {
        "config_name": config_name,
        "model_id": model_id,
        "recorded_at": str(time.time()),
        "final_response": result.final_response,
        "total_iterations": result.total_iterations,
        "num_tool_calls": len(result.all_tool_calls),
        "num_failed_tool_calls": sum(
            1 for record in result.all_tool_calls if record.status == "error"
        ),
        "thoughts": result.joined_thoughts(),
    }


def _thoughts_row(step: IterationStep) -> JsonDict:
    return {
        "kind": "thoughts",
        "iteration": step.iteration,
        "thoughts": step.thoughts,
    }


def _tool_call_row(iteration: int, record: ToolCallRecord) -> JsonDict:
    return {
        "kind": "tool_call",
        "iteration": iteration,
        "tool_name": record.tool_name,
        "tool_input": record.tool_input,
        "tool_output": record.tool_output,
        "execution_time_ms": record.execution_time_ms,
        "status": record.status,
    }


def build_audit_jsonl_lines(result: AgenticResult) -> list[JsonDict]:
    """One thoughts row per iteration that had thoughts, then its tool call rows."""
    lines: list[JsonDict] = []
    for step in result.steps:
        if step.thoughts:
            lines.append(_thoughts_row(step))
        lines.extend(
            _tool_call_row(iteration=step.iteration, record=record)
            for record in step.tool_calls
        )
    return lines


class JsonTranscriptSink:
    """Writes `<stem>.json` and `<stem>.audit.jsonl` into `output_dir`.

    Does NOT inherit from TranscriptSink (structural typing via Protocol).
    """

    def __init__(
        self, output_dir: Path, stem: str, config_name: str, model_id: str
    ) -> None:
        self._output_dir = output_dir
        self._stem = stem
        self._config_name = config_name
        self._model_id = model_id

    @property
    def json_path(self) -> Path:
        return self._output_dir / f"{self._stem}.json"

    @property
    def jsonl_path(self) -> Path:
        return self._output_dir / f"{self._stem}.audit.jsonl"

    def record(self, result: AgenticResult) -> None:
        self._output_dir.mkdir(parents=True, exist_ok=True)

        summary = build_summary_json(
            result=result, config_name=self._config_name, model_id=self._model_id
        )
        summary["audit_file_path"] = self.jsonl_path.name
        self.json_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")

        lines = build_audit_jsonl_lines(result)
        self.jsonl_path.write_text(
            "".join(json.dumps(line) + "\n" for line in lines), encoding="utf-8"
        )
