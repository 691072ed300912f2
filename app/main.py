"""
Streamlit Frontend for Family Accountant

The screens Grant and Shannon use to check tax, CGT, super caps and
trust distributions, and to ask the assistant questions.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every figure comes from a calculator, never typed in by hand
3. Clear error messages in simple language
4. Calculators work even when Supabase or Gemini are not configured
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from family_accountant.calculators import (
    CGTInputError,
    PRESET_SPLITS,
    financial_year_for,
    previous_financial_years,
)
from family_accountant.calculators.rates import default_rates_table
from family_accountant.config import get_settings, validate_all_settings
from family_accountant.formatting import format_aud, format_percent
from family_accountant.models.smsf import (
    CapWarningLevel,
    CarryForwardRecord,
    ContributionRecord,
    ContributionType,
)
from family_accountant.models.tax import AssetType
from family_accountant.models.trust import DistributionSplit, InvalidSplitError
from family_accountant.orchestrator import CalculatorFlow, ChatFlow, create_app_components
from family_accountant.tools import ToolExecutor


# Page configuration
st.set_page_config(
    page_title="Family Accountant",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False, use_llm=False)


def financial_year_options() -> list[str]:
    years = default_rates_table().financial_years
    current = financial_year_for()
    if current not in years:
        years = years + [current]
    return years


def select_financial_year(key: str) -> str:
    options = financial_year_options()
    default = get_settings().app.default_financial_year
    index = options.index(default) if default in options else len(options) - 1
    return st.selectbox("Financial year", options, index=index, key=key)


def main():
    """Main application entry point."""
    calculator_flow, chat_flow, executor = get_components()

    # Sidebar navigation
    st.sidebar.title("💰 Family Accountant")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "🧾 Income Tax",
            "📈 Capital Gains",
            "🏦 Super Caps",
            "🤝 Trust Distribution",
            "❓ Ask the Accountant",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Ask questions like:**
        - "How much tax on $150,000?"
        - "How much concessional cap has Shannon got left?"
        - "What's the best trust split this year?"
        """
    )

    if page == "🧾 Income Tax":
        render_tax_page(calculator_flow)
    elif page == "📈 Capital Gains":
        render_cgt_page(calculator_flow)
    elif page == "🏦 Super Caps":
        render_caps_page(calculator_flow, executor)
    elif page == "🤝 Trust Distribution":
        render_distribution_page(calculator_flow, executor)
    elif page == "❓ Ask the Accountant":
        render_chat_page(chat_flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_tax_page(flow: CalculatorFlow):
    """Render the income tax calculator."""
    st.title("🧾 Income Tax")

    col1, col2 = st.columns(2)
    with col1:
        income = st.number_input("Taxable income ($)", min_value=0, value=100000, step=1000)
        financial_year = select_financial_year("tax_fy")
    with col2:
        include_medicare = st.checkbox("Include Medicare levy", value=True)
        has_phi = st.checkbox("Has private hospital cover", value=True)

    result = run_async(flow.income_tax(income, financial_year, include_medicare, has_phi))

    if result.financial_year != financial_year:
        st.warning(f"Rates for {financial_year} aren't loaded; using {result.financial_year} rates.")

    st.markdown(f'<div class="big-number">{format_aud(result.total_tax)}</div>', unsafe_allow_html=True)
    st.caption("Total tax")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income tax", format_aud(result.income_tax))
    col2.metric("Medicare levy", format_aud(result.medicare_levy))
    col3.metric("Medicare surcharge", format_aud(result.medicare_surcharge))
    col4.metric("Take home", format_aud(result.take_home))

    col1, col2 = st.columns(2)
    col1.metric("Marginal rate", format_percent(result.marginal_rate))
    col2.metric("Effective rate", format_percent(result.effective_rate))


def render_cgt_page(flow: CalculatorFlow):
    """Render the capital gains calculator."""
    st.title("📈 Capital Gains")

    col1, col2 = st.columns(2)
    with col1:
        cost_base = st.number_input("Cost base ($)", min_value=0.0, value=10000.0, step=100.0)
        acquisition_date = st.date_input("Date acquired", value=date(2023, 7, 1))
        asset_type = st.selectbox(
            "Asset type",
            options=list(AssetType),
            format_func=lambda a: a.value.title(),
        )
    with col2:
        sale_price = st.number_input("Sale price ($)", min_value=0.0, value=15000.0, step=100.0)
        sale_date = st.date_input("Date sold", value=date.today())

    try:
        result = run_async(flow.capital_gain(
            Decimal(str(cost_base)),
            Decimal(str(sale_price)),
            acquisition_date,
            sale_date,
            asset_type,
        ))
    except CGTInputError as e:
        st.error(str(e))
        return

    if result.is_loss:
        st.metric("Capital loss", format_aud(result.capital_loss))
    else:
        col1, col2, col3 = st.columns(3)
        col1.metric("Capital gain", format_aud(result.capital_gain))
        col2.metric("Discount", format_percent(result.discount_percent, decimals=0))
        col3.metric("Taxable gain", format_aud(result.taxable_gain))
        if result.months_held is not None:
            st.caption(f"Held for {result.months_held} months")
    st.info(result.note)


def render_caps_page(flow: CalculatorFlow, executor: ToolExecutor):
    """Render the SMSF contribution cap tracker."""
    st.title("🏦 Super Contribution Caps")

    financial_year = select_financial_year("caps_fy")

    st.markdown("### From your fund records")
    if st.button("Load contributions"):
        with st.spinner("Reading SMSF records..."):
            result = run_async(executor.execute(
                "get_smsf_contributions", {"financial_year": financial_year}
            ))
        if "error" in result:
            st.error(result["error"])
        elif "note" in result:
            st.info(result["note"])
        else:
            for member in result["members"]:
                st.markdown(f"#### {member['member_name']}")
                col1, col2 = st.columns(2)
                col1.metric(
                    "Concessional",
                    format_aud(member["concessional"]["contributed"]),
                    f"{format_aud(member['concessional']['remaining'])} left",
                )
                col2.metric(
                    "Non-concessional",
                    format_aud(member["non_concessional"]["contributed"]),
                    f"{format_aud(member['non_concessional']['remaining'])} left",
                )
                for warning in member["warnings"]:
                    st.warning(warning)

    st.markdown("---")
    st.markdown("### What if?")
    col1, col2 = st.columns(2)
    with col1:
        member_name = st.text_input("Member", value="Grant")
        concessional = st.number_input("Concessional contributions ($)", min_value=0, value=20000, step=500)
        non_concessional = st.number_input("Non-concessional contributions ($)", min_value=0, value=0, step=1000)
    with col2:
        balance = st.number_input("Total super balance ($)", min_value=0, value=300000, step=10000)
        unused_last_year = st.number_input("Unused concessional cap last year ($)", min_value=0, value=0, step=500)

    contributions = [
        ContributionRecord(
            financial_year=financial_year,
            contribution_type=ContributionType.CONCESSIONAL,
            amount=concessional,
        ),
        ContributionRecord(
            financial_year=financial_year,
            contribution_type=ContributionType.NON_CONCESSIONAL,
            amount=non_concessional,
        ),
    ]
    carry_forward = [
        CarryForwardRecord(
            financial_year=previous_financial_years(financial_year, 1)[0],
            unused_amount=unused_last_year,
        )
    ]
    summary = run_async(flow.contribution_caps(
        member_name, financial_year, contributions, balance, carry_forward
    ))

    col1, col2, col3 = st.columns(3)
    col1.metric(
        "Concessional used",
        format_percent(summary.concessional.percentage_used),
        f"{format_aud(summary.concessional.remaining)} left",
    )
    col2.metric(
        "Non-concessional used",
        format_percent(summary.non_concessional.percentage_used),
        f"{format_aud(summary.non_concessional.remaining)} left",
    )
    col3.metric("Carry-forward available", format_aud(summary.carry_forward.available))

    if summary.concessional.warning_level != CapWarningLevel.NONE:
        st.progress(min(float(summary.concessional.percentage_used) / 100, 1.0))
    for warning in summary.warnings:
        st.markdown(f'<div class="warning-box">{warning}</div>', unsafe_allow_html=True)


def render_distribution_page(flow: CalculatorFlow, executor: ToolExecutor):
    """Render the trust distribution scenario modeller."""
    st.title("🤝 Trust Distribution")

    trust = run_async(executor.execute("get_trust_summary", {}))
    distributable_default = 50000.0
    franking_default = 0.0
    if "error" not in trust and trust.get("trust_name"):
        st.caption(f"{trust['trust_name']}, {trust['financial_year']}")
        distributable_default = max(float(trust["distributable_amount"]), 0.0)
        franking_default = max(float(trust["franking_credits_available"]), 0.0)
        if trust.get("eofy_warning"):
            st.warning(trust["eofy_warning"])

    col1, col2 = st.columns(2)
    with col1:
        distributable = st.number_input("Distributable amount ($)", min_value=0.0, value=distributable_default, step=1000.0)
        grant_income = st.number_input("Grant's other taxable income ($)", min_value=0.0, value=120000.0, step=1000.0)
    with col2:
        franking = st.number_input("Franking credits ($)", min_value=0.0, value=franking_default, step=100.0)
        shannon_income = st.number_input("Shannon's other taxable income ($)", min_value=0.0, value=40000.0, step=1000.0)

    financial_year = select_financial_year("distribution_fy")

    custom = st.slider("Custom split: % to Grant", min_value=0, max_value=100, value=50, step=5)
    beneficiaries = ["Grant", "Shannon"]
    splits = [DistributionSplit.of(beneficiaries, list(p)) for p in PRESET_SPLITS]
    if (custom, 100 - custom) not in PRESET_SPLITS:
        splits.append(DistributionSplit.of(beneficiaries, [custom, 100 - custom]))

    try:
        model = run_async(flow.distribution(
            Decimal(str(distributable)),
            Decimal(str(franking)),
            {"Grant": Decimal(str(grant_income)), "Shannon": Decimal(str(shannon_income))},
            splits=splits,
            financial_year=financial_year,
        ))
    except InvalidSplitError as e:
        st.error(str(e))
        return

    rec = model.recommendation
    st.success(
        f"Lowest total tax: **{rec.optimal_split}** split, {format_aud(rec.total_tax)} "
        f"({format_aud(rec.tax_savings_vs_baseline)} less than {rec.baseline_split})"
    )

    rows = []
    for scenario in model.scenarios:
        grant = scenario.allocation_for("Grant")
        shannon = scenario.allocation_for("Shannon")
        rows.append({
            "Split (Grant/Shannon)": scenario.split,
            "Grant receives": format_aud(grant.distribution),
            "Shannon receives": format_aud(shannon.distribution),
            "Grant tax": format_aud(grant.tax),
            "Shannon tax": format_aud(shannon.tax),
            "Total tax": format_aud(scenario.total_tax),
        })
    st.table(rows)


def render_chat_page(chat_flow: ChatFlow):
    """Render the question page."""
    st.title("❓ Ask the Accountant")

    if not chat_flow.available:
        st.info("Chat needs a Gemini API key. The calculators still work.")

    if "chat_messages" not in st.session_state:
        st.session_state.chat_messages = []

    for message in st.session_state.chat_messages:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])

    question = st.chat_input("Ask about tax, super or the trust")
    if question:
        st.session_state.chat_messages.append({"role": "user", "content": question})
        with st.chat_message("user"):
            st.markdown(question)

        with st.chat_message("assistant"):
            with st.spinner("Looking up your records..."):
                answer = run_async(chat_flow.answer_question(question))
            st.markdown(answer.answer)
            if answer.tools_used:
                with st.expander("🔍 Tools used"):
                    st.markdown(", ".join(answer.tools_used))

        st.session_state.chat_messages.append({"role": "assistant", "content": answer.answer})


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Supabase (Records)", "supabase"),
        ("Gemini (AI)", "gemini"),
        ("App settings", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Tax rates loaded")
    st.markdown(", ".join(default_rates_table().financial_years))

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
