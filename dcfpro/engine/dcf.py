"""
Pure FCFF DCF math engine.

No pandas, no I/O: takes a fully computed scenario and discounts the free
cash flow of its forecast years. Missing or non-finite numbers never raise;
they coerce to zero.

Key functions:
  calculate_dcf_fcff: Main entry point, returns DCFResult
  compute_terminal_value: Gordon growth terminal value with a guarded
    denominator
"""

import logging
from typing import Any, List, Mapping, Optional, Tuple

from dcfpro.domain.numbers import safe_num
from dcfpro.domain.types import DCFCashflow, DCFResult, Scenario
from dcfpro.domain.types import forecast_years
from dcfpro.domain.types import last_historical_year
from dcfpro.engine.projector import working_capital
from dcfpro.scenarios.config import DCFAssumptions

logger = logging.getLogger(__name__)

MIN_SPREAD = 1e-6


def safe_denominator(denom: float, floor: float = MIN_SPREAD) -> float:
  '''Floor |denom| at floor, keeping its sign (zero counts as positive).'''
  if abs(denom) < floor:
    return -floor if denom < 0 else floor
  return denom


def compute_terminal_value(
    final_fcff: float,
    perpetual_growth: float,
    wacc: float,
    final_year: int,
) -> Tuple[float, float]:
  """
  Compute terminal value using the Gordon Growth Model.

  Args:
    final_fcff: FCFF of the last explicit forecast year
    perpetual_growth: Perpetual growth rate (g)
    wacc: Discount rate
    final_year: Number of years to discount back

  Returns:
    Tuple of (terminal_value, discounted_terminal_value)
  """
  spread = safe_denominator(wacc - perpetual_growth)
  tv = final_fcff * (1.0 + perpetual_growth) / spread
  return tv, tv / ((1.0 + wacc)**final_year)


def _ebit(inputs: Mapping[str, Any], outputs: Mapping[str, Any]) -> float:
  '''Computed EBIT, or revenues - cogs - sgna when it is absent.'''
  ebit = safe_num(outputs.get('ebit'), None)
  if ebit is None:
    ebit = (safe_num(inputs.get('revenues')) - safe_num(inputs.get('cogs')) -
            safe_num(inputs.get('sgna')))
  return ebit


def calculate_dcf_fcff(scenario: Scenario, params: DCFAssumptions) -> DCFResult:
  """
  Discount the forecast FCFF of a computed scenario.

  Forecast years are the years strictly after the last historical year.
  Year t (1-based) is discounted by 1 / (1 + WACC)^t; the terminal value is
  the Gordon perpetuity on the last year's FCFF, discounted by N years.

  Args:
    scenario: Scenario after compute_scenario
    params: WACC, perpetual growth and optional tax rate override
      (19% when not given)

  Returns:
    DCFResult; all zeros with no cash flows when there is no forecast year
  """
  years = forecast_years(scenario)
  if not years:
    logger.debug('No forecast years, returning zero valuation')
    return DCFResult()

  wacc = safe_num(params.wacc)
  growth = safe_num(params.perpetual_growth)
  tax_rate = params.effective_tax_rate

  prev_nwc: Optional[float] = None
  last_hist = last_historical_year(scenario)
  if last_hist is not None:
    prev_nwc = working_capital(scenario[last_hist].inputs)

  cashflows: List[DCFCashflow] = []
  for t, year in enumerate(years, start=1):
    inputs = scenario[year].inputs
    outputs = scenario[year].outputs

    ebit = _ebit(inputs, outputs)
    nwc = working_capital(inputs)
    d_nwc = safe_num(outputs.get('d_nwc'), None)
    if d_nwc is None:
      d_nwc = nwc - prev_nwc if prev_nwc is not None else 0.0
    prev_nwc = nwc

    nopat = ebit * (1.0 - tax_rate)
    fcff = (nopat + safe_num(inputs.get('depr')) -
            safe_num(inputs.get('capex')) - d_nwc)
    discount_factor = 1.0 / ((1.0 + wacc)**t)
    cashflows.append(
        DCFCashflow(year=year,
                    fcff=fcff,
                    discount_factor=discount_factor,
                    present_value=fcff * discount_factor))

  terminal_value, pv_terminal = compute_terminal_value(
      final_fcff=cashflows[-1].fcff,
      perpetual_growth=growth,
      wacc=wacc,
      final_year=len(cashflows),
  )
  pv_cashflows = sum(cf.present_value for cf in cashflows)
  enterprise_value = pv_cashflows + pv_terminal

  last_inputs = scenario[years[-1]].inputs
  net_debt = last_inputs.get('net_debt')
  if net_debt is None:
    net_debt = last_inputs.get('debt')
  terminal_net_debt = safe_num(net_debt)

  raw_equity = enterprise_value - terminal_net_debt

  return DCFResult(
      pv_cashflows=pv_cashflows,
      terminal_value=terminal_value,
      pv_terminal=pv_terminal,
      enterprise_value=enterprise_value,
      terminal_net_debt=terminal_net_debt,
      raw_equity=raw_equity,
      equity_value=max(raw_equity, 0.0),
      cashflows=cashflows,
  )
