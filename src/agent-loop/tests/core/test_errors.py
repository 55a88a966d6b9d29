"""Tests verifying the AgentLoopError type hierarchy."""

from pathlib import Path

from agent_loop.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)
from agent_loop.core.errors import AgentLoopError
from agent_loop.generation.infrastructure.errors import GenerationError
from agent_loop.tools.infrastructure.errors import (
    MalformedConfigError,
    ProviderConnectionError,
    ToolExecutionError,
)


class TestAgentLoopErrorHierarchy:
    """All agent-loop-specific exceptions inherit from AgentLoopError."""

    def test_config_errors(self) -> None:
        assert isinstance(MissingEnvVarsError(missing_vars=["A"]), AgentLoopError)
        assert isinstance(ConfigValidationError(reason="bad"), AgentLoopError)
        assert isinstance(ConfigLoadError(path=Path("/x.yaml")), AgentLoopError)

    def test_tool_errors(self) -> None:
        assert isinstance(MalformedConfigError(provider_id="p", reason="r"), AgentLoopError)
        assert isinstance(ProviderConnectionError(provider_id="p", reason="r"), AgentLoopError)
        assert isinstance(ToolExecutionError(tool_name="t", reason="r"), AgentLoopError)

    def test_generation_error(self) -> None:
        assert isinstance(GenerationError(reason="r"), AgentLoopError)

    def test_agent_loop_error_is_exception(self) -> None:
        assert isinstance(AgentLoopError("test"), Exception)


class TestRetriable:
    def test_defaults_to_not_retriable(self) -> None:
        assert AgentLoopError("x").retriable is False
        assert ToolExecutionError(tool_name="t", reason="r").retriable is False

    def test_connection_errors_are_retriable(self) -> None:
        assert ProviderConnectionError(provider_id="p", reason="r").retriable is True


class TestMessages:
    def test_messages_start_with_failed_to(self) -> None:
        errors: list[AgentLoopError] = [
            MissingEnvVarsError(missing_vars=["B", "A"]),
            ConfigValidationError(reason="bad"),
            ConfigLoadError(path=Path("/x.yaml")),
            MalformedConfigError(provider_id="p", reason="r"),
            ProviderConnectionError(provider_id="p", reason="r"),
            ToolExecutionError(tool_name="t", reason="r"),
            GenerationError(reason="r"),
        ]

        for error in errors:
            assert str(error).startswith("Failed to")

    def test_missing_vars_are_sorted_in_message(self) -> None:
        error = MissingEnvVarsError(missing_vars=["B", "A"])

        assert str(error) == "Failed to load config: missing environment variables: A, B"
