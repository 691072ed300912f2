"""
SMSF Models

Stored records for the self-managed super fund (fund, members,
contributions, carry-forward history) and the contribution cap
summary produced by the cap tracker.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from family_accountant.models.types import Money


# =============================================================================
# ENUMS
# =============================================================================

class ContributionType(str, Enum):
    """
    Contribution types as stored in smsf_contributions.

    Only CONCESSIONAL and NON_CONCESSIONAL count towards a cap.
    The rest are recorded for completeness.
    """
    CONCESSIONAL = "concessional"
    NON_CONCESSIONAL = "non_concessional"
    GOVERNMENT_CO_CONTRIBUTION = "government_co_contribution"
    SPOUSE = "spouse"
    DOWNSIZER = "downsizer"

    @property
    def label(self) -> str:
        return CONTRIBUTION_TYPE_LABELS[self]


CONTRIBUTION_TYPE_LABELS = {
    ContributionType.CONCESSIONAL: "Concessional",
    ContributionType.NON_CONCESSIONAL: "Non-Concessional",
    ContributionType.GOVERNMENT_CO_CONTRIBUTION: "Government Co-contribution",
    ContributionType.SPOUSE: "Spouse Contribution",
    ContributionType.DOWNSIZER: "Downsizer Contribution",
}


class MemberStatus(str, Enum):
    """Member phase."""
    ACCUMULATION = "accumulation"
    TRANSITION_TO_RETIREMENT = "transition_to_retirement"
    PENSION = "pension"


class CapWarningLevel(str, Enum):
    """How close a member is to a contribution cap."""
    NONE = "none"
    APPROACHING = "approaching"  # at or above the warning percentage
    REACHED = "reached"          # at or above 100%


# =============================================================================
# STORED RECORDS
# =============================================================================

class SmsfFund(BaseModel):
    """A row of smsf_funds."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: str
    name: str = Field(..., min_length=1)
    abn: Optional[str] = None
    fund_status: str = "active"


class SmsfMember(BaseModel):
    """A row of smsf_members."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    id: str
    fund_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    date_of_birth: Optional[dt.date] = None
    total_super_balance: Money = Decimal("0")
    member_status: MemberStatus = MemberStatus.ACCUMULATION


class ContributionRecord(BaseModel):
    """A row of smsf_contributions."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    member_id: Optional[str] = None
    financial_year: str
    contribution_type: ContributionType
    amount: Money
    date: Optional[dt.date] = None
    description: Optional[str] = None


class CarryForwardRecord(BaseModel):
    """
    A row of smsf_carry_forward: unused concessional cap for a prior year.
    """
    model_config = ConfigDict(extra="ignore")

    member_id: Optional[str] = None
    financial_year: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    unused_amount: Money = Decimal("0")
    eligible_for_carry_forward: bool = True


# =============================================================================
# CAP TRACKER OUTPUT
# =============================================================================

class CapUsage(BaseModel):
    """Usage of one contribution cap."""

    contributed: Money
    cap: Money
    remaining: Money = Field(..., description="Cap minus contributed, floored at 0")
    percentage_used: Decimal = Field(..., description="Unclamped, one decimal place")
    cap_exceeded: bool
    warning_level: CapWarningLevel


class CarryForwardYear(BaseModel):
    """Unused concessional cap available from one prior year."""

    financial_year: str
    amount: Money


class CarryForwardSummary(BaseModel):
    """Carry-forward (catch-up) concessional contributions available."""

    eligible: bool = Field(
        ...,
        description="Total super balance below the carry-forward threshold"
    )
    available: Money = Field(
        ...,
        description="Sum of unused prior-year amounts (0 when not eligible)"
    )
    breakdown: list[CarryForwardYear] = Field(default_factory=list)


class ContributionLine(BaseModel):
    """A single contribution as listed in a member summary."""

    date: Optional[dt.date] = None
    contribution_type: ContributionType
    amount: Money
    description: Optional[str] = None


class ContributionCapSummary(BaseModel):
    """Per-member, per-year contribution cap position."""

    member_name: str
    financial_year: str
    total_super_balance: Money
    concessional: CapUsage
    non_concessional: CapUsage
    carry_forward: CarryForwardSummary
    effective_concessional_cap: Money = Field(
        ...,
        description="Concessional cap plus available carry-forward"
    )
    warnings: list[str] = Field(default_factory=list)
    contributions: list[ContributionLine] = Field(default_factory=list)

    @field_validator('member_name')
    @classmethod
    def validate_member_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Member name is required")
        return v.strip()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
