"""
Abstract Storage Interface

DESIGN DECISION: The calculators and tools only see this interface.
This allows us to:
1. Run every tool against an in-memory store in tests
2. Keep Supabase query details out of the business logic
3. Use the calculators with no storage at all (Streamlit calculator tabs)

The interface is read-only for finance data. Records are entered
through the family's web app; this package only reads and reasons
about them. The audit log is the one thing we write.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

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


class FinanceStorageInterface(ABC):
    """
    Abstract interface for reading the family's finance records.

    The household has one SMSF and one family trust, so the fund and
    trust getters return the first one found.
    """

    # -------------------------------------------------------------------------
    # SMSF
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_smsf_fund(self) -> Optional[SmsfFund]:
        """
        Get the household's SMSF.

        Returns:
            The fund if one is configured, None otherwise
        """
        pass

    @abstractmethod
    async def list_smsf_members(self, fund_id: str) -> list[SmsfMember]:
        """List the members of a fund."""
        pass

    @abstractmethod
    async def list_smsf_contributions(
        self,
        member_id: str,
        financial_year: str,
        contribution_type: Optional[ContributionType] = None,
    ) -> list[ContributionRecord]:
        """
        List a member's contributions for a financial year.

        Args:
            member_id: The member's identifier
            financial_year: "YYYY-YY"
            contribution_type: Only return this type if given

        Returns:
            Contributions in date order
        """
        pass

    @abstractmethod
    async def list_carry_forward(
        self,
        member_id: str,
        financial_years: Sequence[str],
    ) -> list[CarryForwardRecord]:
        """
        List a member's unused concessional cap history.

        Args:
            member_id: The member's identifier
            financial_years: Only return records for these years

        Returns:
            Matching records, newest financial year first
        """
        pass

    # -------------------------------------------------------------------------
    # FAMILY TRUST
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_trust(self) -> Optional[Trust]:
        """
        Get the household's family trust.

        Returns:
            The trust if one is configured, None otherwise
        """
        pass

    @abstractmethod
    async def list_trust_beneficiaries(
        self,
        trust_id: str,
        active_only: bool = True,
    ) -> list[TrustBeneficiary]:
        pass

    @abstractmethod
    async def list_trust_income(
        self,
        trust_id: str,
        financial_year: str,
    ) -> list[TrustIncomeRecord]:
        """List income received by the trust in a financial year."""
        pass

    @abstractmethod
    async def list_trust_distributions(
        self,
        trust_id: str,
        financial_year: str,
    ) -> list[TrustDistributionRecord]:
        """List distributions already made for a financial year, with beneficiary names."""
        pass

    # -------------------------------------------------------------------------
    # HOUSEHOLD LEDGER
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_transactions(
        self,
        transaction_type: Optional[TransactionType] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        """
        List household transactions with optional filters.

        Args:
            transaction_type: Only income, expense or transfer rows
            date_from: Transactions on or after this date
            date_to: Transactions on or before this date
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
