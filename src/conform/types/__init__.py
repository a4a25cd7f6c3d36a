"""Type definitions for conform."""

from conform.types.agents import (
    AgentConfig,
    AgentDefinition,
    AgentState,
    ExecutionContext,
    ModelConfig,
    ObservabilityConfig,
    PromptsConfig,
    ToolsConfig,
    ValidationConfig,
)
from conform.types.execution import ExecuteFailure, ExecuteMetadata, ExecuteSuccess, TokenUsage
from conform.types.hooks import ExecuteCallbacks, HookEvent
from conform.types.providers import (
    ChatMessage,
    ModelInfo,
    ModelProvider,
    ModelRequest,
    ModelResponse,
    ProviderUsage,
    ToolCall,
    ToolSpec,
)
from conform.types.tools import (
    HelperTool,
    OutputTool,
    ReducerOutput,
    ReflectionHandler,
    ToolOutcome,
    ToolReducer,
)
from conform.types.validation import (
    Invalid,
    LayerInfo,
    LayerResult,
    Valid,
    ValidationOutcome,
    ValidatorKind,
)

__all__ = [
    "AgentConfig",
    "AgentDefinition",
    "AgentState",
    "ChatMessage",
    "ExecuteCallbacks",
    "ExecuteFailure",
    "ExecuteMetadata",
    "ExecuteSuccess",
    "ExecutionContext",
    "HelperTool",
    "HookEvent",
    "Invalid",
    "LayerInfo",
    "LayerResult",
    "ModelConfig",
    "ModelInfo",
    "ModelProvider",
    "ModelRequest",
    "ModelResponse",
    "ObservabilityConfig",
    "OutputTool",
    "PromptsConfig",
    "ProviderUsage",
    "ReducerOutput",
    "ReflectionHandler",
    "TokenUsage",
    "ToolCall",
    "ToolOutcome",
    "ToolReducer",
    "ToolSpec",
    "ToolsConfig",
    "Valid",
    "ValidationConfig",
    "ValidationOutcome",
    "ValidatorKind",
]
