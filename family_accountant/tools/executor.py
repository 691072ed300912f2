"""
Tool Execution Engine

DESIGN DECISION: Tool execution is DETERMINISTIC.
The LLM picks a tool and its arguments. This engine validates the
arguments, reads the stored records and runs the calculators.
The LLM then explains the numbers.

At no point does the LLM produce a figure itself. It can only see
what this engine returns.

GUARANTEES:
- Every call returns a JSON-safe dict
- Bad arguments, calculator input errors and storage failures come
  back as {"error": message}; nothing is raised to the agent
- Every call is audit logged with the turn's correlation ID
"""

import time
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from pydantic import ValidationError

from family_accountant.audit import AuditLogger
from family_accountant.calculators import (
    calculate_cgt,
    calculate_income_tax,
    days_until_eofy,
    financial_year_bounds,
    financial_year_for,
    get_rates,
    model_distribution,
    parse_financial_year,
    previous_financial_years,
    summarise_contributions,
)
from family_accountant.config import get_settings
from family_accountant.models.ledger import TransactionType
from family_accountant.models.smsf import ContributionType
from family_accountant.models.trust import (
    BeneficiaryDistributionTotal,
    DistributionSplit,
    FrankingCreditBalance,
    TrustSummary,
)
from family_accountant.services.storage import FinanceStorageInterface, StorageError
from family_accountant.tools.definitions import (
    CalculateCGTArgs,
    CalculateDistributionArgs,
    CalculateTaxArgs,
    GetFrankingCreditsArgs,
    GetSmsfContributionsArgs,
    GetTaxSummaryArgs,
    GetTrustDistributionsArgs,
    GetTrustIncomeArgs,
    GetTrustSummaryArgs,
    TOOL_DEFINITIONS,
)
from family_accountant.validation import ZERO

# Beneficiary names used by calculate_distribution's arguments
GRANT = "Grant"
SHANNON = "Shannon"

NOTHING_TO_DISTRIBUTE = "No distributable amount available. All income has been distributed."
NO_TRUST_CONFIGURED = "No Family Trust configured. Please set up your trust in the Trust section."
STREAMING_NOTE = (
    "Franking credits can be streamed to specific beneficiaries. Stream to the "
    "beneficiary with higher taxable income to maximise tax offset value."
)


class ToolExecutionError(Exception):
    """A tool could not produce a result. Converted to {"error": ...} by execute()."""
    pass


def _total(values) -> Decimal:
    return sum(values, ZERO)


def _parse_date(value: Optional[str], field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ToolExecutionError(f"Invalid {field}: {value!r} (expected YYYY-MM-DD)")


class ToolExecutor:
    """
    Executes the assistant's tool calls.

    This is the bridge between:
    - Tool calls chosen by the model
    - Stored records and the calculators
    """

    def __init__(
        self,
        storage: Optional[FinanceStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            storage: Finance records. Tools that read records return an
                error when this is None; calculator tools still work.
            audit_logger: Audit trail (a local-only logger if omitted)
            today: Clock used for "current financial year" defaults
        """
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._today = today
        self._handlers: dict[str, Callable[[Any], Awaitable[dict[str, Any]]]] = {
            "calculate_tax": self._calculate_tax,
            "calculate_cgt": self._calculate_cgt,
            "calculate_distribution": self._calculate_distribution,
            "get_tax_summary": self._get_tax_summary,
            "get_smsf_contributions": self._get_smsf_contributions,
            "get_trust_summary": self._get_trust_summary,
            "get_trust_income": self._get_trust_income,
            "get_trust_distributions": self._get_trust_distributions,
            "get_franking_credits": self._get_franking_credits,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def execute(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> dict[str, Any]:
        """
        Run one tool call.

        Returns:
            The tool's result, or {"error": message}
        """
        arguments = arguments or {}
        await self._audit.log_tool_invoked(name, arguments, correlation_id)
        started = time.perf_counter()

        try:
            definition = TOOL_DEFINITIONS.get(name)
            handler = self._handlers.get(name)
            if definition is None or handler is None:
                raise ToolExecutionError(f"Unknown tool: {name}")

            try:
                args = definition.arguments.model_validate(arguments)
            except ValidationError as e:
                problems = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                )
                raise ToolExecutionError(f"Invalid arguments for {name}: {problems}")

            result = await handler(args)

        except StorageError as e:
            await self._audit.log_storage_error(name, str(e), correlation_id)
            return await self._failed(name, f"Could not read records: {e}", correlation_id)
        except (ToolExecutionError, ValueError) as e:
            return await self._failed(name, str(e), correlation_id)
        except Exception as e:
            await self._audit.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"tool": name},
                correlation_id=correlation_id,
            )
            return await self._failed(name, f"Unexpected error: {e}", correlation_id)

        await self._audit.log_tool_completed(
            name,
            (time.perf_counter() - started) * 1000,
            correlation_id,
        )
        return result

    async def _failed(
        self,
        name: str,
        message: str,
        correlation_id: Optional[UUID],
    ) -> dict[str, Any]:
        await self._audit.log_tool_failed(name, message, correlation_id)
        return {"error": message}

    def _current_financial_year(self) -> str:
        return financial_year_for(self._today())

    def _require_storage(self) -> FinanceStorageInterface:
        if self._storage is None:
            raise ToolExecutionError("Financial records are not available (storage not configured)")
        return self._storage

    # -------------------------------------------------------------------------
    # CALCULATORS
    # -------------------------------------------------------------------------

    async def _calculate_tax(self, args: CalculateTaxArgs) -> dict[str, Any]:
        result = calculate_income_tax(
            Decimal(str(args.taxable_income)),
            financial_year=args.financial_year,
            include_medicare=args.include_medicare,
            has_phi=args.has_phi,
        )
        return result.model_dump(mode="json")

    async def _calculate_cgt(self, args: CalculateCGTArgs) -> dict[str, Any]:
        result = calculate_cgt(
            Decimal(str(args.cost_base)),
            Decimal(str(args.sale_price)),
            args.acquisition_date,
            args.sale_date,
            args.asset_type,
        )
        return result.model_dump(mode="json")

    async def _calculate_distribution(self, args: CalculateDistributionArgs) -> dict[str, Any]:
        storage = self._require_storage()
        financial_year = self._current_financial_year()

        trust = await storage.get_trust()
        if trust is None:
            raise ToolExecutionError("No trust found")

        income = await storage.list_trust_income(trust.id, financial_year)
        distributions = await storage.list_trust_distributions(trust.id, financial_year)

        distributable = _total(i.amount for i in income) - _total(d.amount for d in distributions)
        franking = _total(i.franking_credits for i in income)

        if distributable <= 0:
            return {
                "note": NOTHING_TO_DISTRIBUTE,
                "financial_year": financial_year,
                "distributable_amount": "0",
            }

        splits = [
            DistributionSplit.of([GRANT, SHANNON], [s.grant_percent, s.shannon_percent])
            for s in args.scenarios
        ]
        model = model_distribution(
            distributable,
            franking,
            {
                GRANT: Decimal(str(args.grant_other_income)),
                SHANNON: Decimal(str(args.shannon_other_income)),
            },
            splits=splits,
            financial_year=financial_year,
        )
        return model.model_dump(mode="json")

    # -------------------------------------------------------------------------
    # PERSONAL
    # -------------------------------------------------------------------------

    async def _get_tax_summary(self, args: GetTaxSummaryArgs) -> dict[str, Any]:
        storage = self._require_storage()
        start, end = financial_year_bounds(args.financial_year)

        income = await storage.list_transactions(TransactionType.INCOME, start, end)
        expenses = await storage.list_transactions(TransactionType.EXPENSE, start, end)

        total_income = _total(t.amount for t in income)
        total_expenses = _total(abs(t.amount) for t in expenses)
        # Deductions are not tracked per transaction, so taxable income is gross income
        estimate = calculate_income_tax(total_income, financial_year=args.financial_year)

        return {
            "financial_year": args.financial_year,
            "person": args.person,
            "total_income": str(total_income),
            "total_expenses": str(total_expenses),
            "taxable_income": str(estimate.taxable_income),
            "estimated_tax": str(estimate.income_tax),
            "medicare_levy": str(estimate.medicare_levy),
            "total_tax_payable": str(estimate.total_tax),
            "effective_rate": f"{estimate.effective_rate}%",
            "rates_year": estimate.financial_year,
        }

    # -------------------------------------------------------------------------
    # SMSF
    # -------------------------------------------------------------------------

    async def _get_smsf_contributions(self, args: GetSmsfContributionsArgs) -> dict[str, Any]:
        storage = self._require_storage()
        financial_year = args.financial_year or self._current_financial_year()
        parse_financial_year(financial_year)

        fund = await storage.get_smsf_fund()
        if fund is None:
            return {"note": "No SMSF fund configured.", "financial_year": financial_year, "members": []}

        members = await storage.list_smsf_members(fund.id)
        if not members:
            return {"note": "No SMSF members configured.", "financial_year": financial_year, "members": []}

        if args.member:
            wanted = args.member.lower()
            members = [m for m in members if wanted in m.name.lower()]

        rates = get_rates(financial_year)
        contribution_type = (
            ContributionType(args.contribution_type) if args.contribution_type else None
        )

        summaries = []
        for member in members:
            contributions = await storage.list_smsf_contributions(
                member.id, financial_year, contribution_type
            )
            carry_forward = await storage.list_carry_forward(
                member.id, previous_financial_years(financial_year, rates.carry_forward_years)
            )
            summary = summarise_contributions(
                member.name,
                financial_year,
                contributions,
                total_super_balance=member.total_super_balance,
                carry_forward=carry_forward,
                rates=rates,
            )
            summaries.append(summary.model_dump(mode="json"))

        return {
            "financial_year": financial_year,
            "fund_name": fund.name,
            "concessional_cap": str(rates.concessional_cap),
            "non_concessional_cap": str(rates.non_concessional_cap),
            "members": summaries,
        }

    # -------------------------------------------------------------------------
    # FAMILY TRUST
    # -------------------------------------------------------------------------

    async def _get_trust_summary(self, args: GetTrustSummaryArgs) -> dict[str, Any]:
        storage = self._require_storage()
        financial_year = args.financial_year or self._current_financial_year()
        parse_financial_year(financial_year)

        trust = await storage.get_trust()
        if trust is None:
            return {"note": NO_TRUST_CONFIGURED, "trust_name": None, "financial_year": financial_year}

        beneficiaries = await storage.list_trust_beneficiaries(trust.id)
        income = await storage.list_trust_income(trust.id, financial_year)
        distributions = await storage.list_trust_distributions(trust.id, financial_year)

        totals: dict[str, BeneficiaryDistributionTotal] = {}
        for d in distributions:
            key = d.beneficiary_id or d.beneficiary_name
            if key not in totals:
                totals[key] = BeneficiaryDistributionTotal(
                    name=d.beneficiary_name, amount=ZERO, franking=ZERO
                )
            totals[key].amount += d.amount
            totals[key].franking += d.franking_credits_streamed

        income_ytd = _total(i.amount for i in income)
        franking_received = _total(i.franking_credits for i in income)
        distributed = _total(d.amount for d in distributions)
        franking_distributed = _total(d.franking_credits_streamed for d in distributions)

        days = days_until_eofy(self._today())
        warning = None
        if days <= get_settings().app.eofy_warning_days:
            warning = f"WARNING: {days} days until 30 June distribution deadline"

        summary = TrustSummary(
            trust_name=trust.name,
            trustee_name=trust.trustee_name,
            financial_year=financial_year,
            income_ytd=income_ytd,
            franking_credits_received=franking_received,
            distributions_ytd=distributed,
            franking_credits_distributed=franking_distributed,
            distributable_amount=income_ytd - distributed,
            franking_credits_available=franking_received - franking_distributed,
            days_until_eofy=days,
            eofy_warning=warning,
            beneficiaries=[b.name for b in beneficiaries],
            distributions_by_beneficiary=list(totals.values()),
        )
        return summary.model_dump(mode="json")

    async def _get_trust_income(self, args: GetTrustIncomeArgs) -> dict[str, Any]:
        storage = self._require_storage()
        financial_year = args.financial_year or self._current_financial_year()
        parse_financial_year(financial_year)
        date_from = _parse_date(args.date_from, "date_from")
        date_to = _parse_date(args.date_to, "date_to")

        trust = await storage.get_trust()
        if trust is None:
            raise ToolExecutionError("No trust found")

        income = await storage.list_trust_income(trust.id, financial_year)
        if args.income_type:
            income = [i for i in income if i.income_type.value == args.income_type]
        # Undated records cannot satisfy a date range
        if date_from:
            income = [i for i in income if i.date is not None and i.date >= date_from]
        if date_to:
            income = [i for i in income if i.date is not None and i.date <= date_to]
        income.sort(key=lambda i: i.date or date.min, reverse=True)

        return {
            "financial_year": financial_year,
            "total_income": str(_total(i.amount for i in income)),
            "total_franking_credits": str(_total(i.franking_credits for i in income)),
            "income_items": [
                {
                    "date": i.date.isoformat() if i.date else None,
                    "source": i.source,
                    "type": i.income_type.value,
                    "amount": str(i.amount),
                    "franking_credits": str(i.franking_credits),
                }
                for i in income
            ],
            "count": len(income),
        }

    async def _get_trust_distributions(self, args: GetTrustDistributionsArgs) -> dict[str, Any]:
        storage = self._require_storage()
        financial_year = args.financial_year or self._current_financial_year()
        parse_financial_year(financial_year)

        trust = await storage.get_trust()
        if trust is None:
            raise ToolExecutionError("No trust found")

        distributions = await storage.list_trust_distributions(trust.id, financial_year)
        if args.beneficiary_name:
            wanted = args.beneficiary_name.lower()
            distributions = [d for d in distributions if wanted in d.beneficiary_name.lower()]

        by_beneficiary: dict[str, dict[str, Any]] = {}
        for d in distributions:
            entry = by_beneficiary.setdefault(
                d.beneficiary_name, {"total": ZERO, "franking": ZERO, "distributions": []}
            )
            entry["total"] += d.amount
            entry["franking"] += d.franking_credits_streamed
            entry["distributions"].append({
                "date": d.date.isoformat() if d.date else None,
                "amount": str(d.amount),
                "franking_streamed": str(d.franking_credits_streamed),
                "type": d.distribution_type,
                "is_paid": d.is_paid,
            })

        return {
            "financial_year": financial_year,
            "total_distributed": str(_total(d.amount for d in distributions)),
            "total_franking_streamed": str(_total(d.franking_credits_streamed for d in distributions)),
            "by_beneficiary": {
                name: {**entry, "total": str(entry["total"]), "franking": str(entry["franking"])}
                for name, entry in by_beneficiary.items()
            },
            "count": len(distributions),
        }

    async def _get_franking_credits(self, args: GetFrankingCreditsArgs) -> dict[str, Any]:
        storage = self._require_storage()
        financial_year = args.financial_year or self._current_financial_year()
        parse_financial_year(financial_year)

        trust = await storage.get_trust()
        if trust is None:
            return {"note": "No trust found", "financial_year": financial_year}

        income = await storage.list_trust_income(trust.id, financial_year)
        distributions = await storage.list_trust_distributions(trust.id, financial_year)

        received = _total(i.franking_credits for i in income)
        streamed = _total(d.franking_credits_streamed for d in distributions)

        balance = FrankingCreditBalance(
            financial_year=financial_year,
            credits_received=received,
            credits_distributed=streamed,
            balance=received - streamed,
            streaming_note=STREAMING_NOTE,
        )
        return balance.model_dump(mode="json")
