"""
Main Orchestrator for Family Accountant

This module ties together all the components and defines the
end-to-end flows for:
1. Calculators (form input -> calculator -> audited result)
2. Chat (question -> agent -> tools -> answer)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No figure reaches the user without coming from a calculator
- Every calculation and tool call is audited
- Missing configuration degrades features instead of crashing the app:
  without Supabase the calculators still work, without Gemini the
  chat says it is unavailable
"""

from typing import Any, Iterable, Optional, Sequence

import structlog

from family_accountant.agents import AccountantAgent, AgentAnswer
from family_accountant.audit import AuditLogger, create_correlation_id
from family_accountant.calculators import (
    calculate_cgt,
    calculate_income_tax,
    model_distribution,
    summarise_contributions,
)
from family_accountant.models.smsf import (
    CarryForwardRecord,
    ContributionCapSummary,
    ContributionRecord,
)
from family_accountant.models.tax import AssetType, CGTCalculation, TaxCalculation
from family_accountant.models.trust import DistributionModel, DistributionSplit
from family_accountant.services.storage import (
    FinanceStorageInterface,
    SupabaseAuditStorage,
    SupabaseClient,
    SupabaseFinanceStorage,
)
from family_accountant.tools import ToolExecutor

logger = structlog.get_logger(__name__)

CHAT_UNAVAILABLE = (
    "Chat isn't available because the Gemini API isn't configured. "
    "Set GEMINI_API_KEY and restart the app."
)


class CalculatorFlow:
    """
    Runs the calculators for the app's form screens.

    Results are returned as-is; inputs are audited so a figure shown
    on screen can be traced later.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit_logger = audit_logger or AuditLogger()

    async def income_tax(
        self,
        taxable_income: Any,
        financial_year: Optional[str] = None,
        include_medicare: bool = True,
        has_phi: bool = True,
    ) -> TaxCalculation:
        result = calculate_income_tax(
            taxable_income,
            financial_year=financial_year,
            include_medicare=include_medicare,
            has_phi=has_phi,
        )
        await self._audit_logger.log_calculation(
            "income_tax",
            {
                "taxable_income": str(taxable_income),
                "include_medicare": include_medicare,
                "has_phi": has_phi,
            },
            result.financial_year,
        )
        return result

    async def capital_gain(
        self,
        cost_base: Any,
        sale_price: Any,
        acquisition_date: Any,
        sale_date: Any,
        asset_type: AssetType | str = AssetType.SHARES,
    ) -> CGTCalculation:
        """
        Raises:
            CGTInputError: If the dates cannot describe a sale
        """
        result = calculate_cgt(cost_base, sale_price, acquisition_date, sale_date, asset_type)
        await self._audit_logger.log_calculation(
            "cgt",
            {
                "cost_base": str(cost_base),
                "sale_price": str(sale_price),
                "acquisition_date": str(acquisition_date),
                "sale_date": str(sale_date),
                "asset_type": str(result.asset_type.value),
            },
        )
        return result

    async def contribution_caps(
        self,
        member_name: str,
        financial_year: str,
        contributions: Iterable[ContributionRecord],
        total_super_balance: Any = 0,
        carry_forward: Iterable[CarryForwardRecord] = (),
    ) -> ContributionCapSummary:
        summary = summarise_contributions(
            member_name,
            financial_year,
            contributions,
            total_super_balance=total_super_balance,
            carry_forward=carry_forward,
        )
        await self._audit_logger.log_calculation(
            "contribution_caps",
            {
                "member_name": member_name,
                "contributions": len(summary.contributions),
                "total_super_balance": str(summary.total_super_balance),
            },
            financial_year,
        )
        return summary

    async def distribution(
        self,
        distributable_amount: Any,
        franking_credits: Any,
        other_income: dict[str, Any],
        splits: Optional[Sequence[DistributionSplit]] = None,
        financial_year: Optional[str] = None,
    ) -> DistributionModel:
        """
        Raises:
            InvalidSplitError: If a split does not allocate exactly 100%
        """
        result = model_distribution(
            distributable_amount,
            franking_credits,
            other_income,
            splits=splits,
            financial_year=financial_year,
        )
        await self._audit_logger.log_calculation(
            "distribution",
            {
                "distributable_amount": str(distributable_amount),
                "franking_credits": str(franking_credits),
                "other_income": {k: str(v) for k, v in other_income.items()},
                "splits": [s.label for s in splits] if splits else None,
            },
            result.financial_year,
        )
        return result


class ChatFlow:
    """
    Orchestrates the chat flow.

    CRITICAL BOUNDARIES:
    1. The agent only sees what the tools return
    2. Tools only read records and run calculators
    3. No agent means no answers, never a guessed one
    """

    def __init__(self, agent: Optional[AccountantAgent] = None):
        self._agent = agent

    @property
    def available(self) -> bool:
        return self._agent is not None

    async def answer_question(
        self,
        question: str,
        history: Optional[list] = None,
    ) -> AgentAnswer:
        if self._agent is None:
            return AgentAnswer(
                answer=CHAT_UNAVAILABLE,
                correlation_id=create_correlation_id(),
                error="Gemini not configured",
            )
        return await self._agent.ask(question, history=history)


def create_app_components(
    use_storage: bool = True,
    use_llm: bool = True,
) -> tuple[CalculatorFlow, ChatFlow, ToolExecutor]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Supabase storage.
                    Set to False for testing without storage.
        use_llm: Whether to initialize the Gemini agent.

    Returns:
        (calculator_flow, chat_flow, tool_executor)
    """
    finance_storage: Optional[FinanceStorageInterface] = None
    audit_logger = AuditLogger()  # Local-only logging until storage is up

    if use_storage:
        try:
            client = SupabaseClient()
            finance_storage = SupabaseFinanceStorage(client)
            audit_logger = AuditLogger(SupabaseAuditStorage(client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))

    executor = ToolExecutor(finance_storage, audit_logger)

    agent = None
    if use_llm:
        try:
            agent = AccountantAgent(executor, audit_logger)
        except Exception as e:
            logger.warning("llm_not_configured", error=str(e))

    return CalculatorFlow(audit_logger), ChatFlow(agent), executor
