"""
AI Tools Package

The functions the assistant may call, their argument schemas and the
executor that runs them against storage and the calculators.
"""

from family_accountant.tools.definitions import (
    TOOL_DEFINITIONS,
    ToolDefinition,
    all_tools,
    function_declarations,
    personal_finance_tools,
    smsf_tools,
    trust_tools,
)
from family_accountant.tools.executor import ToolExecutionError, ToolExecutor

__all__ = [
    "TOOL_DEFINITIONS",
    "ToolDefinition",
    "ToolExecutionError",
    "ToolExecutor",
    "all_tools",
    "function_declarations",
    "personal_finance_tools",
    "smsf_tools",
    "trust_tools",
]
