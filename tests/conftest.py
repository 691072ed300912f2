"""
Shared fixtures.

No test talks to Supabase or Gemini. Storage is replaced by
InMemoryFinanceStorage and audit storage by RecordingAuditStorage.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from family_accountant.calculators.rates import default_rates_table
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
from family_accountant.services.storage import (
    AuditStorageInterface,
    FinanceStorageInterface,
)


class InMemoryFinanceStorage(FinanceStorageInterface):
    """Finance storage backed by plain lists."""

    def __init__(self):
        self.fund: Optional[SmsfFund] = None
        self.members: list[SmsfMember] = []
        self.contributions: list[ContributionRecord] = []
        self.carry_forward: list[CarryForwardRecord] = []
        self.trust: Optional[Trust] = None
        self.beneficiaries: list[TrustBeneficiary] = []
        self.trust_income: list[TrustIncomeRecord] = []
        self.trust_distributions: list[TrustDistributionRecord] = []
        self.transactions: list[Transaction] = []

    async def get_smsf_fund(self):
        return self.fund

    async def list_smsf_members(self, fund_id):
        return [m for m in self.members if m.fund_id == fund_id]

    async def list_smsf_contributions(self, member_id, financial_year, contribution_type=None):
        return [
            c for c in self.contributions
            if c.member_id == member_id
            and c.financial_year == financial_year
            and (contribution_type is None or c.contribution_type == contribution_type)
        ]

    async def list_carry_forward(self, member_id, financial_years):
        records = [
            r for r in self.carry_forward
            if r.member_id == member_id and r.financial_year in financial_years
        ]
        records.sort(key=lambda r: r.financial_year, reverse=True)
        return records

    async def get_trust(self):
        return self.trust

    async def list_trust_beneficiaries(self, trust_id, active_only=True):
        return [
            b for b in self.beneficiaries
            if b.trust_id == trust_id and (b.is_active or not active_only)
        ]

    async def list_trust_income(self, trust_id, financial_year):
        return [
            i for i in self.trust_income
            if i.trust_id == trust_id and i.financial_year == financial_year
        ]

    async def list_trust_distributions(self, trust_id, financial_year):
        return [
            d for d in self.trust_distributions
            if d.trust_id == trust_id and d.financial_year == financial_year
        ]

    async def list_transactions(self, transaction_type=None, date_from=None, date_to=None):
        return [
            t for t in self.transactions
            if (transaction_type is None or t.transaction_type == transaction_type)
            and (date_from is None or t.date >= date_from)
            and (date_to is None or t.date <= date_to)
        ]


class RecordingAuditStorage(AuditStorageInterface):
    """Keeps appended events in memory."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True


@pytest.fixture(autouse=True)
def clear_cached_config():
    """Settings and the rates table are cached per process; reset around each test."""
    get_settings.cache_clear()
    default_rates_table.cache_clear()
    yield
    get_settings.cache_clear()
    default_rates_table.cache_clear()


@pytest.fixture
def storage() -> InMemoryFinanceStorage:
    return InMemoryFinanceStorage()


@pytest.fixture
def audit_storage() -> RecordingAuditStorage:
    return RecordingAuditStorage()


@pytest.fixture
def family_storage(storage: InMemoryFinanceStorage) -> InMemoryFinanceStorage:
    """
    The household as recorded for 2024-25:
    - SMSF with Grant (over the concessional cap) and Shannon
    - Family trust with $100,000 income and $25,000 franking credits,
      $30,000 already distributed to Grant
    - A few income and expense transactions
    """
    storage.fund = SmsfFund(id="fund-1", name="G & S Super Fund")
    storage.members = [
        SmsfMember(id="m-grant", fund_id="fund-1", name="Grant Moyle", total_super_balance=Decimal("420000")),
        SmsfMember(id="m-shannon", fund_id="fund-1", name="Shannon Moyle", total_super_balance=Decimal("610000")),
    ]
    storage.contributions = [
        ContributionRecord(
            member_id="m-grant", financial_year="2024-25",
            contribution_type=ContributionType.CONCESSIONAL, amount=Decimal("20000"),
            date=date(2024, 9, 30), description="Employer SG",
        ),
        ContributionRecord(
            member_id="m-grant", financial_year="2024-25",
            contribution_type=ContributionType.CONCESSIONAL, amount=Decimal("15000"),
            date=date(2025, 3, 1), description="Salary sacrifice",
        ),
        ContributionRecord(
            member_id="m-grant", financial_year="2024-25",
            contribution_type=ContributionType.NON_CONCESSIONAL, amount=Decimal("10000"),
            date=date(2025, 3, 5),
        ),
        ContributionRecord(
            member_id="m-shannon", financial_year="2024-25",
            contribution_type=ContributionType.CONCESSIONAL, amount=Decimal("12000"),
            date=date(2024, 12, 1),
        ),
        ContributionRecord(
            member_id="m-shannon", financial_year="2023-24",
            contribution_type=ContributionType.CONCESSIONAL, amount=Decimal("27500"),
            date=date(2024, 6, 1),
        ),
    ]
    storage.carry_forward = [
        CarryForwardRecord(member_id="m-grant", financial_year="2023-24", unused_amount=Decimal("7500")),
        CarryForwardRecord(member_id="m-grant", financial_year="2022-23", unused_amount=Decimal("2500")),
        CarryForwardRecord(member_id="m-shannon", financial_year="2023-24", unused_amount=Decimal("5000")),
    ]

    storage.trust = Trust(id="trust-1", name="Moyle Family Trust", trustee_name="Moyle Australia Pty Ltd")
    storage.beneficiaries = [
        TrustBeneficiary(id="b-grant", trust_id="trust-1", name="Grant"),
        TrustBeneficiary(id="b-shannon", trust_id="trust-1", name="Shannon"),
        TrustBeneficiary(id="b-old", trust_id="trust-1", name="Former", is_active=False),
    ]
    storage.trust_income = [
        TrustIncomeRecord(
            trust_id="trust-1", financial_year="2024-25", date=date(2024, 9, 20),
            source="BHP", amount=Decimal("60000"), franking_credits=Decimal("20000"),
        ),
        TrustIncomeRecord(
            trust_id="trust-1", financial_year="2024-25", date=date(2025, 3, 20),
            source="CBA", amount=Decimal("40000"), franking_credits=Decimal("5000"),
        ),
        TrustIncomeRecord(
            trust_id="trust-1", financial_year="2023-24", date=date(2024, 3, 20),
            source="CBA", amount=Decimal("35000"), franking_credits=Decimal("9000"),
        ),
    ]
    storage.trust_distributions = [
        TrustDistributionRecord(
            trust_id="trust-1", beneficiary_id="b-grant", beneficiary_name="Grant",
            financial_year="2024-25", amount=Decimal("30000"),
            franking_credits_streamed=Decimal("10000"),
        ),
    ]

    storage.transactions = [
        Transaction(date=date(2024, 7, 15), description="Salary", amount=Decimal("60000"),
                    transaction_type=TransactionType.INCOME),
        Transaction(date=date(2025, 1, 15), description="Salary", amount=Decimal("40000"),
                    transaction_type=TransactionType.INCOME),
        Transaction(date=date(2024, 6, 30), description="Salary (last year)", amount=Decimal("99999"),
                    transaction_type=TransactionType.INCOME),
        Transaction(date=date(2024, 8, 1), description="Accountant fee", amount=Decimal("-1200"),
                    transaction_type=TransactionType.EXPENSE),
    ]
    return storage
