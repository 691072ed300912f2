"""
AI Tool Definitions

Each tool the assistant can call is a name, a description and a
pydantic model describing its arguments. The JSON schema the model
sees is generated from that pydantic model, so the arguments we
validate are exactly the arguments we advertise.

DESIGN DECISION: Argument names, types, defaults and enums are part of
the contract with the web app's assistant and must not drift. Tests
pin them.

Two schema renderings exist:
- parameters_schema(): plain JSON schema with defaults, for display
  and for checking the contract
- function_declaration(): the subset Gemini function calling accepts
  (no defaults, titles or $refs)
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ARGUMENT MODELS
# =============================================================================

class ToolArguments(BaseModel):
    """Base for tool arguments. Unknown arguments from the model are ignored."""
    model_config = ConfigDict(extra="ignore")


class CalculateTaxArgs(ToolArguments):
    taxable_income: float = Field(..., description="Taxable income amount in dollars")
    financial_year: str = "2024-25"
    include_medicare: bool = True
    has_phi: bool = Field(default=True, description="Has private health insurance")


class CalculateCGTArgs(ToolArguments):
    cost_base: float = Field(..., description="Original cost of the asset")
    sale_price: float = Field(..., description="Sale price of the asset")
    acquisition_date: str = Field(..., description="Date acquired in YYYY-MM-DD format")
    sale_date: str = Field(..., description="Date sold in YYYY-MM-DD format")
    asset_type: Literal["shares", "property", "crypto", "other"] = "shares"


class ScenarioSplit(BaseModel):
    grant_percent: float = Field(..., description="Percentage to Grant (0-100)")
    shannon_percent: float = Field(..., description="Percentage to Shannon (0-100)")


DEFAULT_TOOL_SCENARIOS = [
    ScenarioSplit(grant_percent=50, shannon_percent=50),
    ScenarioSplit(grant_percent=60, shannon_percent=40),
    ScenarioSplit(grant_percent=70, shannon_percent=30),
    ScenarioSplit(grant_percent=100, shannon_percent=0),
    ScenarioSplit(grant_percent=0, shannon_percent=100),
]


class CalculateDistributionArgs(ToolArguments):
    grant_other_income: float = Field(
        ...,
        description="Grant's taxable income excluding trust distribution"
    )
    shannon_other_income: float = Field(
        ...,
        description="Shannon's taxable income excluding trust distribution"
    )
    scenarios: list[ScenarioSplit] = Field(default=DEFAULT_TOOL_SCENARIOS)


class GetTaxSummaryArgs(ToolArguments):
    financial_year: str = Field(
        ...,
        description="Financial year in format YYYY-YY (e.g., 2024-25)"
    )
    person: Optional[str] = Field(
        default=None,
        description="Person name (Grant or Shannon)"
    )


class GetSmsfContributionsArgs(ToolArguments):
    financial_year: Optional[str] = Field(
        default=None,
        description="Financial year in format YYYY-YY (defaults to current FY)"
    )
    member: Optional[str] = Field(
        default=None,
        description="Member name to filter by"
    )
    contribution_type: Optional[Literal["concessional", "non_concessional"]] = Field(
        default=None,
        description="Filter by contribution type"
    )


class GetTrustSummaryArgs(ToolArguments):
    financial_year: Optional[str] = Field(
        default=None,
        description="Financial year in format YYYY-YY (defaults to current FY)"
    )


class GetTrustIncomeArgs(ToolArguments):
    financial_year: Optional[str] = Field(
        default=None,
        description="Financial year in format YYYY-YY"
    )
    income_type: Optional[Literal["dividend", "interest", "rent", "capital_gain", "other"]] = Field(
        default=None,
        description="Filter by income type"
    )
    date_from: Optional[str] = Field(
        default=None,
        description="Start date in YYYY-MM-DD format"
    )
    date_to: Optional[str] = Field(
        default=None,
        description="End date in YYYY-MM-DD format"
    )


class GetTrustDistributionsArgs(ToolArguments):
    financial_year: Optional[str] = Field(
        default=None,
        description="Financial year in format YYYY-YY"
    )
    beneficiary_name: Optional[str] = Field(
        default=None,
        description="Filter by beneficiary name (Grant or Shannon)"
    )


class GetFrankingCreditsArgs(ToolArguments):
    financial_year: Optional[str] = Field(
        default=None,
        description="Financial year in format YYYY-YY"
    )


# =============================================================================
# SCHEMA RENDERING
# =============================================================================

# Keys Gemini's Schema type understands
_GEMINI_KEYS = {"type", "format", "description", "enum", "items", "properties", "required"}


def _resolve(node: Any, defs: dict[str, Any]) -> Any:
    """Inline $refs and collapse Optional[...] (anyOf with null) to the inner type."""
    if isinstance(node, list):
        return [_resolve(item, defs) for item in node]
    if not isinstance(node, dict):
        return node

    if "$ref" in node:
        target = defs[node["$ref"].split("/")[-1]]
        merged = {**target, **{k: v for k, v in node.items() if k != "$ref"}}
        return _resolve(merged, defs)

    if "anyOf" in node:
        options = [o for o in node["anyOf"] if o.get("type") != "null"]
        if len(options) == 1:
            merged = {**options[0], **{k: v for k, v in node.items() if k != "anyOf"}}
            return _resolve(merged, defs)

    resolved = {}
    for key, value in node.items():
        if key == "$defs" or key == "title":
            continue
        if key == "default" and value is None:
            continue
        if key == "properties":
            resolved[key] = {name: _resolve(prop, defs) for name, prop in value.items()}
        else:
            resolved[key] = _resolve(value, defs)
    return resolved


def _gemini(node: Any) -> Any:
    if isinstance(node, list):
        return [_gemini(item) for item in node]
    if not isinstance(node, dict):
        return node

    cleaned = {}
    for key, value in node.items():
        if key not in _GEMINI_KEYS:
            continue
        if key == "properties":
            cleaned[key] = {name: _gemini(prop) for name, prop in value.items()}
        else:
            cleaned[key] = _gemini(value)
    if "enum" in cleaned:
        cleaned.setdefault("type", "string")
        cleaned["format"] = "enum"
    return cleaned


class ToolDefinition(BaseModel):
    """A tool the assistant can call."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    arguments: type[ToolArguments]

    def parameters_schema(self) -> dict[str, Any]:
        schema = self.arguments.model_json_schema()
        return _resolve(schema, schema.get("$defs", {}))

    def function_declaration(self) -> dict[str, Any]:
        """Declaration in the form google.generativeai accepts for `tools=`."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": _gemini(self.parameters_schema()),
        }


# =============================================================================
# REGISTRY
# =============================================================================

TOOL_DEFINITIONS: dict[str, ToolDefinition] = {
    tool.name: tool
    for tool in [
        ToolDefinition(
            name="get_tax_summary",
            description="Get tax summary including income and deductions for a financial year",
            arguments=GetTaxSummaryArgs,
        ),
        ToolDefinition(
            name="calculate_tax",
            description=(
                "Calculate income tax for a given taxable income amount using "
                "Australian resident tax rates (2024-25 unless another year is given)"
            ),
            arguments=CalculateTaxArgs,
        ),
        ToolDefinition(
            name="calculate_cgt",
            description="Calculate capital gains tax for an asset sale",
            arguments=CalculateCGTArgs,
        ),
        ToolDefinition(
            name="get_smsf_contributions",
            description=(
                "Get SMSF contributions with cap tracking for a financial year. "
                "Shows concessional and non-concessional contributions with "
                "remaining cap space and carry-forward eligibility."
            ),
            arguments=GetSmsfContributionsArgs,
        ),
        ToolDefinition(
            name="get_trust_summary",
            description=(
                "Get Family Trust summary including income YTD, distributable amount, "
                "franking credits, and beneficiaries"
            ),
            arguments=GetTrustSummaryArgs,
        ),
        ToolDefinition(
            name="get_trust_income",
            description="Get trust income (dividends, interest, etc.) with franking credits for a financial year",
            arguments=GetTrustIncomeArgs,
        ),
        ToolDefinition(
            name="get_trust_distributions",
            description="Get trust distribution history by beneficiary for a financial year",
            arguments=GetTrustDistributionsArgs,
        ),
        ToolDefinition(
            name="get_franking_credits",
            description="Get franking credits balance and streaming options for a financial year",
            arguments=GetFrankingCreditsArgs,
        ),
        ToolDefinition(
            name="calculate_distribution",
            description="Model distribution scenarios between Grant and Shannon to minimise total tax",
            arguments=CalculateDistributionArgs,
        ),
    ]
}


def _group(*names: str) -> dict[str, ToolDefinition]:
    return {name: TOOL_DEFINITIONS[name] for name in names}


personal_finance_tools = _group("get_tax_summary", "calculate_tax", "calculate_cgt")
smsf_tools = _group("get_smsf_contributions")
trust_tools = _group(
    "get_trust_summary",
    "get_trust_income",
    "get_trust_distributions",
    "get_franking_credits",
    "calculate_distribution",
)
all_tools = {**personal_finance_tools, **smsf_tools, **trust_tools}


def function_declarations(tools: Optional[dict[str, ToolDefinition]] = None) -> list[dict[str, Any]]:
    """Gemini function declarations for a tool group (all tools by default)."""
    return [tool.function_declaration() for tool in (tools or all_tools).values()]
