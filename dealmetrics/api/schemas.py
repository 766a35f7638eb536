"""
Request schemas and response serialization for the calculation API.

The JSON contract uses camelCase field names (``purchasePrice``,
``annualizedROI``); engine records use snake_case.
"""

import enum
from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dealmetrics.calculations.models import (
    HoldingPeriodInputs,
    PropertyUse,
    UnderwritingInputs,
)

# Abbreviations kept upper-case in the JSON contract
ACRONYMS = {"roi": "ROI", "pi": "PI", "hoa": "HOA"}


def to_camel_alias(name: str) -> str:
    """Convert a snake_case field name to its camelCase JSON name."""
    head, *rest = name.split("_")
    return head + "".join(ACRONYMS.get(part, part.capitalize()) for part in rest)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {to_camel_alias(key): _camelize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_camelize(item) for item in value]
    if isinstance(value, enum.Enum):
        return value.value
    return value


def serialize(record: Any) -> Any:
    """Convert an engine record (or list of records) to a camelCase dict."""
    if isinstance(record, list):
        return [serialize(item) for item in record]
    if is_dataclass(record):
        return _camelize(asdict(record))
    return record


class CamelModel(BaseModel):
    """Base model accepting camelCase JSON or snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel_alias, populate_by_name=True)


class PurchaseType(str, enum.Enum):
    """Purchase type selected on the deal form."""

    primary_residence = "primary_residence"
    investment_property = "investment_property"
    house_hack = "house_hack"
    vacation_home = "vacation_home"
    other = "other"


Money = Annotated[float, Field(ge=0)]
Percent = Annotated[float, Field(ge=0, le=100)]


class UnderwritingRequest(CamelModel):
    """Deal assumptions as edited on the deal form."""

    purchase_price: Money
    closing_cost_rate: Percent = 0.0
    rehab_cost: Money = 0.0
    down_payment_pct: Percent
    interest_rate: Percent
    term_years: int = Field(ge=0, le=50)
    pmi_enabled: bool = False
    pmi_monthly: float = Field(default=0.0, ge=0)
    taxes_annual: Money = 0.0
    insurance_annual: Money = 0.0
    hoa_monthly: Money = 0.0
    utilities_monthly: Money = 0.0
    rent_monthly: Money = 0.0
    other_income_monthly: Money = 0.0
    vacancy_rate: Percent = 0.0
    maintenance_rate: Percent = 0.0
    capex_rate: Percent = 0.0
    management_rate: Percent = 0.0
    property_use: Optional[PropertyUse] = None

    def to_inputs(self) -> UnderwritingInputs:
        return UnderwritingInputs(**self.model_dump())


class HoldingPeriodRequest(CamelModel):
    """Underwriting inputs plus holding-period growth assumptions."""

    underwriting_inputs: UnderwritingRequest
    holding_period_years: int = Field(ge=0, le=50)
    appreciation_rate: float = Field(ge=-100, le=100)
    rent_growth_rate: float = Field(ge=-100, le=100)
    expense_growth_rate: float = Field(ge=-100, le=100)
    selling_cost_rate: Percent

    def to_inputs(self) -> HoldingPeriodInputs:
        return HoldingPeriodInputs(
            underwriting_inputs=self.underwriting_inputs.to_inputs(),
            holding_period_years=self.holding_period_years,
            appreciation_rate=self.appreciation_rate,
            rent_growth_rate=self.rent_growth_rate,
            expense_growth_rate=self.expense_growth_rate,
            selling_cost_rate=self.selling_cost_rate,
        )


class PrimaryResidenceRequest(UnderwritingRequest):
    """Underwriting inputs with an optional comparable market rent."""

    market_rent_monthly: Optional[float] = Field(default=None, ge=0)

    def to_inputs(self) -> UnderwritingInputs:
        return UnderwritingInputs(**self.model_dump(exclude={"market_rent_monthly"}))


class PrimaryResidenceHoldingPeriodRequest(HoldingPeriodRequest):
    """Holding-period inputs with an optional comparable market rent."""

    market_rent_monthly: Optional[float] = Field(default=None, ge=0)


class AnalyzeDealRequest(UnderwritingRequest):
    """Full deal analysis request; holding-period fields are optional."""

    purchase_type: Optional[PurchaseType] = None
    holding_period_years: Optional[int] = Field(default=None, ge=0, le=50)
    appreciation_rate: Optional[float] = Field(default=None, ge=-100, le=100)
    rent_growth_rate: Optional[float] = Field(default=None, ge=-100, le=100)
    expense_growth_rate: Optional[float] = Field(default=None, ge=-100, le=100)
    selling_cost_rate: Optional[float] = Field(default=None, ge=0, le=100)
    market_rent_monthly: Optional[float] = Field(default=None, ge=0)

    def to_inputs(self) -> UnderwritingInputs:
        fields = set(UnderwritingRequest.model_fields)
        data = self.model_dump(include=fields)
        if data["property_use"] is None:
            if self.purchase_type == PurchaseType.primary_residence:
                data["property_use"] = PropertyUse.primary_residence
            elif self.purchase_type == PurchaseType.investment_property:
                data["property_use"] = PropertyUse.investment
        return UnderwritingInputs(**data)


class IRRRequest(CamelModel):
    """Input for IRR calculation."""

    cash_flows: List[float]


class IRRResponse(CamelModel):
    """Response with IRR calculation."""

    irr: float
    multiple: float
    profit: float
    npv_at_10_percent: float


class AmortizationRequest(CamelModel):
    """Input for amortization schedule."""

    principal: Money
    annual_rate: Percent
    term_years: int = Field(ge=0, le=50)
    start_date: Optional[date] = None
