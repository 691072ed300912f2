"""
Data Models Package

This package contains all Pydantic models used in the Family Accountant system.
All data flowing through the calculators and tools must conform to these schemas.
"""

from family_accountant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from family_accountant.models.ledger import Transaction, TransactionType
from family_accountant.models.smsf import (
    CapUsage,
    CapWarningLevel,
    CarryForwardRecord,
    CarryForwardSummary,
    CarryForwardYear,
    ContributionCapSummary,
    ContributionLine,
    ContributionRecord,
    ContributionType,
    MemberStatus,
    SmsfFund,
    SmsfMember,
)
from family_accountant.models.tax import (
    AssetType,
    CGTCalculation,
    SurchargeTier,
    TaxBracket,
    TaxCalculation,
    TaxYearRates,
)
from family_accountant.models.trust import (
    BeneficiaryAllocation,
    BeneficiaryDistributionTotal,
    DistributionModel,
    DistributionRecommendation,
    DistributionScenario,
    DistributionSplit,
    FrankingCreditBalance,
    InvalidSplitError,
    Trust,
    TrustBeneficiary,
    TrustDistributionRecord,
    TrustIncomeRecord,
    TrustIncomeType,
    TrustSummary,
)
from family_accountant.models.types import Money

__all__ = [
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Ledger
    "Transaction",
    "TransactionType",
    # SMSF
    "CapUsage",
    "CapWarningLevel",
    "CarryForwardRecord",
    "CarryForwardSummary",
    "CarryForwardYear",
    "ContributionCapSummary",
    "ContributionLine",
    "ContributionRecord",
    "ContributionType",
    "MemberStatus",
    "SmsfFund",
    "SmsfMember",
    # Tax
    "AssetType",
    "CGTCalculation",
    "SurchargeTier",
    "TaxBracket",
    "TaxCalculation",
    "TaxYearRates",
    # Trust
    "BeneficiaryAllocation",
    "BeneficiaryDistributionTotal",
    "DistributionModel",
    "DistributionRecommendation",
    "DistributionScenario",
    "DistributionSplit",
    "FrankingCreditBalance",
    "InvalidSplitError",
    "Trust",
    "TrustBeneficiary",
    "TrustDistributionRecord",
    "TrustIncomeRecord",
    "TrustIncomeType",
    "TrustSummary",
    # Types
    "Money",
]
