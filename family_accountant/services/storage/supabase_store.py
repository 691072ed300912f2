"""
Supabase Storage Implementation

DESIGN DECISION: The family's web app already keeps everything in
Supabase (hosted Postgres with row level security), so we read the
same tables rather than keeping a second copy:

    smsf_funds, smsf_members, smsf_contributions, smsf_carry_forward,
    trusts, trust_beneficiaries, trust_income, trust_distributions,
    transactions (joined to categories)

TRADEOFFS:
- The supabase client is synchronous; queries block the event loop
  briefly. Fine for a single-household app.
- Amounts come back as strings or floats depending on the column type.
  The pydantic models coerce both to Decimal.

Every query goes through SupabaseClient.execute(), which retries
transient failures before the storage class turns them into
StorageError.
"""

from datetime import date
from typing import Any, Optional, Sequence

import structlog
from supabase import Client, create_client
from tenacity import retry, stop_after_attempt, wait_exponential

from family_accountant.config import get_settings
from family_accountant.models.audit import AuditEvent
from family_accountant.models.ledger import Transaction, TransactionType
from family_accountant.models.smsf import (
    CarryForwardRecord,
    ContributionRecord,
    ContributionType,
    SmsfFund,
    SmsfMember,
)
from family_accountant.models.trust import (
    Trust,
    TrustBeneficiary,
    TrustDistributionRecord,
    TrustIncomeRecord,
)
from family_accountant.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    FinanceStorageInterface,
    StorageError,
)

logger = structlog.get_logger(__name__)


class SupabaseClient:
    """
    Low-level Supabase client wrapper.

    Handles connection and provides retry logic for queries.
    """

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        self._client: Optional[Client] = None
        if url and key:
            self._url, self._key = url, key
        else:
            settings = get_settings().supabase
            self._url, self._key = settings.url, settings.key

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> Client:
        """Create the Supabase client on first use."""
        if self._client is None:
            try:
                self._client = create_client(self._url, self._key)
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Supabase: {e}")
        return self._client

    def table(self, name: str):
        return self.connect().table(name)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def execute(self, query) -> list[dict[str, Any]]:
        """Run a query builder and return its rows."""
        response = query.execute()
        return list(response.data or [])


def _joined_name(row: dict[str, Any], key: str) -> Optional[str]:
    """Name from an embedded one-to-one select such as `category:categories(name)`."""
    joined = row.get(key)
    if isinstance(joined, dict):
        return joined.get("name")
    return None


class SupabaseFinanceStorage(FinanceStorageInterface):
    """Supabase implementation of the finance reads."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    def _rows(self, query, operation: str) -> list[dict[str, Any]]:
        try:
            return self._client.execute(query)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to {operation}: {e}")

    # -------------------------------------------------------------------------
    # SMSF
    # -------------------------------------------------------------------------

    async def get_smsf_fund(self) -> Optional[SmsfFund]:
        rows = self._rows(
            self._client.table("smsf_funds").select("*").limit(1),
            "get SMSF fund",
        )
        return SmsfFund.model_validate(rows[0]) if rows else None

    async def list_smsf_members(self, fund_id: str) -> list[SmsfMember]:
        rows = self._rows(
            self._client.table("smsf_members").select("*").eq("fund_id", fund_id),
            "list SMSF members",
        )
        return [SmsfMember.model_validate(r) for r in rows]

    async def list_smsf_contributions(
        self,
        member_id: str,
        financial_year: str,
        contribution_type: Optional[ContributionType] = None,
    ) -> list[ContributionRecord]:
        query = (
            self._client.table("smsf_contributions")
            .select("*")
            .eq("member_id", member_id)
            .eq("financial_year", financial_year)
        )
        if contribution_type:
            query = query.eq("contribution_type", ContributionType(contribution_type).value)
        rows = self._rows(query.order("date"), "list SMSF contributions")
        return [ContributionRecord.model_validate(r) for r in rows]

    async def list_carry_forward(
        self,
        member_id: str,
        financial_years: Sequence[str],
    ) -> list[CarryForwardRecord]:
        if not financial_years:
            return []
        rows = self._rows(
            self._client.table("smsf_carry_forward")
            .select("*")
            .eq("member_id", member_id)
            .in_("financial_year", list(financial_years))
            .order("financial_year", desc=True),
            "list carry-forward history",
        )
        return [CarryForwardRecord.model_validate(r) for r in rows]

    # -------------------------------------------------------------------------
    # FAMILY TRUST
    # -------------------------------------------------------------------------

    async def get_trust(self) -> Optional[Trust]:
        rows = self._rows(
            self._client.table("trusts").select("*").limit(1),
            "get trust",
        )
        return Trust.model_validate(rows[0]) if rows else None

    async def list_trust_beneficiaries(
        self,
        trust_id: str,
        active_only: bool = True,
    ) -> list[TrustBeneficiary]:
        query = self._client.table("trust_beneficiaries").select("*").eq("trust_id", trust_id)
        if active_only:
            query = query.eq("is_active", True)
        rows = self._rows(query, "list trust beneficiaries")
        return [TrustBeneficiary.model_validate(r) for r in rows]

    async def list_trust_income(
        self,
        trust_id: str,
        financial_year: str,
    ) -> list[TrustIncomeRecord]:
        rows = self._rows(
            self._client.table("trust_income")
            .select("*")
            .eq("trust_id", trust_id)
            .eq("financial_year", financial_year)
            .order("date", desc=True),
            "list trust income",
        )
        return [TrustIncomeRecord.model_validate(r) for r in rows]

    async def list_trust_distributions(
        self,
        trust_id: str,
        financial_year: str,
    ) -> list[TrustDistributionRecord]:
        rows = self._rows(
            self._client.table("trust_distributions")
            .select("*, beneficiary:trust_beneficiaries(name)")
            .eq("trust_id", trust_id)
            .eq("financial_year", financial_year)
            .order("date", desc=True),
            "list trust distributions",
        )
        records = []
        for row in rows:
            name = _joined_name(row, "beneficiary")
            data = {k: v for k, v in row.items() if k != "beneficiary"}
            if name:
                data["beneficiary_name"] = name
            records.append(TrustDistributionRecord.model_validate(data))
        return records

    # -------------------------------------------------------------------------
    # HOUSEHOLD LEDGER
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        transaction_type: Optional[TransactionType] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        query = self._client.table("transactions").select("*, category:categories(name)")
        if transaction_type:
            query = query.eq("transaction_type", TransactionType(transaction_type).value)
        if date_from:
            query = query.gte("date", date_from.isoformat())
        if date_to:
            query = query.lte("date", date_to.isoformat())

        rows = self._rows(query.order("date", desc=True), "list transactions")
        transactions = []
        for row in rows:
            data = dict(row)
            data["category"] = _joined_name(row, "category")
            transactions.append(Transaction.model_validate(data))
        return transactions


class SupabaseAuditStorage(AuditStorageInterface):
    """
    Supabase implementation of audit storage.

    One row per event in the configured audit table.
    """

    def __init__(
        self,
        client: Optional[SupabaseClient] = None,
        table_name: Optional[str] = None,
    ):
        self._client = client or SupabaseClient()
        self._table_name = table_name or get_settings().supabase.audit_table

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._client.execute(
                self._client.table(self._table_name).insert(event.to_row())
            )
            return True
        except Exception as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning(
                "audit_append_failed",
                event_id=str(event.event_id),
                error=str(e),
            )
            return False
