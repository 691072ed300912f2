"""AI agents package."""

from family_accountant.agents.accountant import AccountantAgent, AgentAnswer
from family_accountant.agents.prompts import build_system_prompt

__all__ = ["AccountantAgent", "AgentAnswer", "build_system_prompt"]
