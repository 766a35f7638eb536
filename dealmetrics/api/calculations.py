"""
Financial calculation API endpoints.

These endpoints accept deal assumptions and return calculated results.
The engine neither validates nor defaults; both happen here.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from dealmetrics.api.schemas import (
    AmortizationRequest,
    AnalyzeDealRequest,
    HoldingPeriodRequest,
    IRRRequest,
    IRRResponse,
    PrimaryResidenceHoldingPeriodRequest,
    PrimaryResidenceRequest,
    PurchaseType,
    UnderwritingRequest,
    serialize,
)
from dealmetrics.calculations import amortization, irr
from dealmetrics.calculations.holding_period import calculate_holding_period_analysis
from dealmetrics.calculations.models import HoldingPeriodInputs
from dealmetrics.calculations.primary_residence import (
    calculate_primary_residence_analysis,
    calculate_primary_residence_holding_period,
)
from dealmetrics.calculations.underwriting import calculate_underwriting
from dealmetrics.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _market_rent(
    market_rent_monthly: Optional[float],
    rent_monthly: float,
    purchase_price: float,
    settings: Settings,
) -> float:
    """Supplied market rent, else the deal's rent, else a share of price."""
    if market_rent_monthly:
        return market_rent_monthly
    if rent_monthly:
        return rent_monthly
    return purchase_price * settings.market_rent_fallback_rate / 100


def _or_default(value, default):
    return default if value is None else value


@router.post("/underwriting")
async def calculate_underwriting_endpoint(inputs: UnderwritingRequest):
    """Calculate point-in-time underwriting outputs."""
    return serialize(calculate_underwriting(inputs.to_inputs()))


@router.post("/holding-period")
async def calculate_holding_period_endpoint(inputs: HoldingPeriodRequest):
    """Calculate the multi-year projection, exit, IRR and equity multiple."""
    logger.info(f"Holding period analysis for {inputs.holding_period_years} years")
    return serialize(calculate_holding_period_analysis(inputs.to_inputs()))


@router.post("/primary-residence")
async def calculate_primary_residence_endpoint(inputs: PrimaryResidenceRequest):
    """Calculate the homeowner cost-of-ownership view."""
    outputs = calculate_primary_residence_analysis(
        inputs.to_inputs(), market_rent_monthly=inputs.market_rent_monthly
    )
    return serialize(outputs)


@router.post("/primary-residence/holding-period")
async def calculate_primary_residence_holding_period_endpoint(
    inputs: PrimaryResidenceHoldingPeriodRequest,
    settings: Settings = Depends(get_settings),
):
    """Calculate the homeowner holding-period view with rent-vs-buy break-even."""
    deal = inputs.underwriting_inputs
    market_rent = _market_rent(
        inputs.market_rent_monthly, deal.rent_monthly, deal.purchase_price, settings
    )
    outputs = calculate_primary_residence_holding_period(
        inputs.to_inputs(),
        market_rent_monthly=market_rent,
        reinvestment_rate=settings.renter_reinvestment_rate,
    )
    return serialize(outputs)


@router.post("/analyze")
async def analyze_deal(inputs: AnalyzeDealRequest, settings: Settings = Depends(get_settings)):
    """
    Run every analysis that applies to a deal.

    The holding-period analysis runs only when ``holdingPeriodYears`` is
    greater than zero; the primary-residence views only for primary
    residence purchases.
    """
    underwriting_inputs = inputs.to_inputs()
    is_primary_residence = inputs.purchase_type == PurchaseType.primary_residence

    holding_period_analysis = None
    primary_residence_outputs = None
    primary_residence_holding_period = None

    if is_primary_residence:
        primary_residence_outputs = calculate_primary_residence_analysis(
            underwriting_inputs, market_rent_monthly=inputs.market_rent_monthly
        )

    if inputs.holding_period_years:
        holding_period_inputs = HoldingPeriodInputs(
            underwriting_inputs=underwriting_inputs,
            holding_period_years=inputs.holding_period_years,
            appreciation_rate=_or_default(
                inputs.appreciation_rate, settings.default_appreciation_rate
            ),
            rent_growth_rate=_or_default(
                inputs.rent_growth_rate, settings.default_rent_growth_rate
            ),
            expense_growth_rate=_or_default(
                inputs.expense_growth_rate, settings.default_expense_growth_rate
            ),
            selling_cost_rate=_or_default(
                inputs.selling_cost_rate, settings.default_selling_cost_rate
            ),
        )
        holding_period_analysis = calculate_holding_period_analysis(holding_period_inputs)

        if is_primary_residence:
            market_rent = _market_rent(
                inputs.market_rent_monthly,
                inputs.rent_monthly,
                inputs.purchase_price,
                settings,
            )
            primary_residence_holding_period = calculate_primary_residence_holding_period(
                holding_period_inputs,
                market_rent_monthly=market_rent,
                reinvestment_rate=settings.renter_reinvestment_rate,
            )

    logger.info(
        f"Analyzed deal: purchase_type={inputs.purchase_type}, "
        f"holding_period_years={inputs.holding_period_years}"
    )

    return {
        "outputs": serialize(calculate_underwriting(underwriting_inputs)),
        "holdingPeriodAnalysis": serialize(holding_period_analysis),
        "primaryResidenceOutputs": serialize(primary_residence_outputs),
        "primaryResidenceHoldingPeriod": serialize(primary_residence_holding_period),
    }


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRRequest):
    """Calculate IRR for given annual cash flows."""
    if len(inputs.cash_flows) < 2:
        logger.warning("IRR requested with fewer than 2 cash flows")
        raise HTTPException(status_code=400, detail="At least 2 cash flows required")

    try:
        multiple = irr.calculate_multiple(inputs.cash_flows)
    except ValueError as e:
        logger.warning(f"IRR request rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return IRRResponse(
        irr=irr.calculate_irr(inputs.cash_flows),
        multiple=multiple,
        profit=sum(inputs.cash_flows),
        npv_at_10_percent=irr.calculate_npv(inputs.cash_flows, 0.10),
    )


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationRequest):
    """Generate loan amortization schedule."""
    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate_pct=inputs.annual_rate,
        term_years=inputs.term_years,
        start_date=inputs.start_date,
    )

    return {
        "monthlyPayment": amortization.monthly_payment(
            inputs.principal, inputs.annual_rate, inputs.term_years
        ),
        "schedule": serialize(schedule),
        "totalInterest": amortization.calculate_total_interest(schedule),
        "totalPrincipal": sum(row.principal for row in schedule),
    }
