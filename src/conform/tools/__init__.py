"""Helper tool construction and the built-in sampler tool."""

from conform.tools.base import (
    SUBMIT_TOOL,
    SUBMIT_TOOL_NAME,
    helper_tool,
    render_tool_result,
    tool_specs,
)
from conform.tools.sampler import (
    HasSamplerState,
    RequestMoreSamplesInput,
    SamplerState,
    request_more_samples,
)

__all__ = [
    "SUBMIT_TOOL",
    "SUBMIT_TOOL_NAME",
    "HasSamplerState",
    "RequestMoreSamplesInput",
    "SamplerState",
    "helper_tool",
    "render_tool_result",
    "request_more_samples",
    "tool_specs",
]
