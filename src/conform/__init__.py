"""conform: drive an LLM to a structured output that passes your validators.

Usage:
    import conform

    definition = conform.define_agent(config)  # Ok(AgentDefinition) | Err([...])
    result = await conform.execute(definition.value, input=doc, provider=provider)
    match result:
        case conform.Ok(value=success):
            print(success.output)
        case conform.Err(error=failure):
            print(conform.format_agent_errors(failure.errors))
"""

from conform.core.define import define_agent
from conform.core.engine import execute
from conform.errors import (
    AgentError,
    AgentProcessingError,
    Err,
    ErrorCategory,
    ErrorCode,
    Ok,
    Result,
    format_agent_error,
    format_agent_errors,
    is_err,
    is_ok,
)
from conform.prompts.templates import PromptResolutionError, PromptTemplate
from conform.tools.base import helper_tool
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
from conform.types.execution import ExecuteFailure, ExecuteMetadata, ExecuteSuccess
from conform.types.hooks import ExecuteCallbacks
from conform.types.tools import HelperTool, OutputTool, ReducerOutput
from conform.validation.validators import (
    Issue,
    SchemaValidator,
    SemanticValidationError,
    custom_validator,
)

__version__ = "0.1.0"

__all__ = [
    # Core API
    "define_agent",
    "execute",
    # Configuration
    "AgentConfig",
    "AgentDefinition",
    "ModelConfig",
    "ObservabilityConfig",
    "PromptTemplate",
    "PromptsConfig",
    "ToolsConfig",
    "ValidationConfig",
    # State and results
    "AgentState",
    "ExecuteCallbacks",
    "ExecuteFailure",
    "ExecuteMetadata",
    "ExecuteSuccess",
    "ExecutionContext",
    # Tools
    "HelperTool",
    "OutputTool",
    "ReducerOutput",
    "helper_tool",
    # Validation
    "Issue",
    "SchemaValidator",
    "SemanticValidationError",
    "custom_validator",
    # Errors
    "AgentError",
    "AgentProcessingError",
    "Err",
    "ErrorCategory",
    "ErrorCode",
    "Ok",
    "PromptResolutionError",
    "Result",
    "format_agent_error",
    "format_agent_errors",
    "is_err",
    "is_ok",
]
