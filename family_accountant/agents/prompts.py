"""System prompt for the accountant assistant."""

from datetime import date
from typing import Optional

from family_accountant.calculators import financial_year_for, get_rates
from family_accountant.formatting import format_aud, format_percent
from family_accountant.models.tax import TaxYearRates

FAMILY_PROFILE = """\
FAMILY
- Grant Moyle and Shannon Moyle, three dependent children, Brisbane QLD.
- SMSF: G & S Super Fund. Members Grant and Shannon, both in accumulation phase.
- Family trust: Moyle Family Trust, investment holding (mainly dividends).
  Beneficiaries are Grant and Shannon only."""

RULES = """\
HOW TO ANSWER
- Never work a figure out in your head. Use a tool for every number:
  calculate_tax, calculate_cgt and calculate_distribution for calculations,
  the get_* tools for the family's records.
- If a tool returns an "error", say what went wrong; do not guess a value.
- If a tool returns a "note" saying there is no data, tell the user plainly.
- Quote dollar amounts in AUD without cents unless cents matter.
- Trust income must be distributed by 30 June. Mention the deadline when it is
  close and the question is about the trust.
- This is general information, not personal financial advice. Suggest a
  registered tax agent for anything that depends on facts you cannot see."""


def _brackets(rates: TaxYearRates) -> str:
    lines = []
    for bracket in rates.brackets:
        rate = format_percent(bracket.rate * 100, decimals=0)
        if bracket.rate == 0:
            lines.append(f"  Up to {format_aud(rates.brackets[1].threshold)}: tax-free")
        else:
            lines.append(
                f"  Over {format_aud(bracket.threshold)}: {format_aud(bracket.base_tax)}"
                f" + {rate} of the excess"
            )
    return "\n".join(lines)


def build_system_prompt(today: Optional[date] = None) -> str:
    """
    System prompt for the current financial year.

    Brackets and caps are read from the rates table so the prompt never
    disagrees with the calculators.
    """
    financial_year = financial_year_for(today)
    rates = get_rates(financial_year)

    return "\n\n".join([
        "You are the AI accountant for the Moyle family's personal finance app. "
        "You can read their personal, SMSF and family trust records through tools "
        "and you know Australian individual, super and trust taxation.",
        FAMILY_PROFILE,
        f"CURRENT FINANCIAL YEAR: {financial_year} "
        f"(rates below are for {rates.financial_year})",
        "RESIDENT INCOME TAX\n" + _brackets(rates)
        + f"\n  Medicare levy: {format_percent(rates.medicare_levy_rate * 100)}",
        "SUPER\n"
        f"  Concessional cap: {format_aud(rates.concessional_cap)}\n"
        f"  Non-concessional cap: {format_aud(rates.non_concessional_cap)}\n"
        f"  Carry-forward: unused concessional cap from the last "
        f"{rates.carry_forward_years} years if total super balance is under "
        f"{format_aud(rates.carry_forward_balance_threshold)}",
        RULES,
    ])
