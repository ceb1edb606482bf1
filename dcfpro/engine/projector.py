"""
Scenario projection engine.

Two sequential passes over a normalized scenario:

  compute_historical: derives gross profit, EBIT, net income, working
    capital change, operating cash flow and FCFF for every reported year.
  compute_forecast: projects forecast years from the last reported year
    using a resolved ModelAssumptions set.

Each pass threads an explicit running state (previous NWC, net debt, ...)
through an ascending loop over the years; a year only ever reads the state
left by its predecessor. No pandas, no I/O.

Key functions:
  compute_scenario: Main entry point, both passes
  compute_historical: Historical pass
  compute_forecast: Forecast pass
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, Mapping, Optional

from dcfpro.domain.numbers import safe_num
from dcfpro.domain.types import RawStatementYear, Scenario, ScenarioYear
from dcfpro.domain.types import sorted_years
from dcfpro.engine.financials import calc_net_debt
from dcfpro.engine.financials import next_ppe
from dcfpro.scenarios.config import DAYS_PER_YEAR
from dcfpro.scenarios.config import DEFAULT_MODEL_PARAMS
from dcfpro.scenarios.config import ModelAssumptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoricalState:
  '''Carried between historical years.'''
  prev_nwc: float = 0.0
  prev_net_debt: Optional[float] = None


@dataclass(frozen=True)
class ForecastState:
  '''
  Carried between forecast years: everything year t reads from year t-1.

  Attributes:
    revenues: Previous revenues
    ppe: Previous PPE
    nwc: Previous net working capital
    net_debt: Previous net debt (None if unknown)
    debt: Last reported gross debt, carried unchanged (None if unknown)
    cash: Previous cash (None if unknown)
  '''
  revenues: float
  ppe: float
  nwc: float
  net_debt: Optional[float]
  debt: Optional[float]
  cash: Optional[float]

  @classmethod
  def from_year(cls, year: ScenarioYear) -> 'ForecastState':
    '''Seed the state from a computed year record.'''
    inputs = year.inputs
    revenues = inputs.get('revenues')
    if revenues is None:
      revenues = year.outputs.get('revenues')
    return cls(
        revenues=safe_num(revenues),
        ppe=safe_num(inputs.get('ppe')),
        nwc=working_capital(inputs),
        net_debt=_first_not_none(inputs.get('net_debt'), inputs.get('debt')),
        debt=inputs.get('debt'),
        cash=inputs.get('cash'),
    )


def _first_not_none(*values: Any) -> Any:
  for value in values:
    if value is not None:
      return value
  return None


def working_capital(inputs: Mapping[str, Any]) -> float:
  '''NWC = receivables + inventory - payables (missing items count as 0).'''
  return (safe_num(inputs.get('receivables')) +
          safe_num(inputs.get('inventory')) -
          safe_num(inputs.get('payables')))


def project_working_capital(
    revenues: float,
    cogs: float,
    cfg: ModelAssumptions,
) -> Dict[str, float]:
  '''
  Receivables, inventory and payables for a forecast year.

  Day counts are preferred. Inventory and payables are driven by COGS; when
  COGS is zero they fall back to the percent-of-revenue assumptions.
  '''
  receivables = revenues * cfg.receivables_days / DAYS_PER_YEAR
  if cogs != 0:
    inventory = cogs * cfg.inventory_days / DAYS_PER_YEAR
    payables = cogs * cfg.payables_days / DAYS_PER_YEAR
  else:
    inventory = revenues * cfg.inventory_pct
    payables = revenues * cfg.payables_pct
  return {
      'receivables': receivables,
      'inventory': inventory,
      'payables': payables,
  }


def _debt_from_components(components: Any) -> Optional[float]:
  '''Gross debt from a debt_components entry (a number or {"total": x}).'''
  if components is None:
    return None
  if isinstance(components, Mapping):
    return safe_num(components.get('total'), None)
  return safe_num(components, None)


def _income_and_cash_flow(
    revenues: float,
    cogs: float,
    sgna: float,
    depr: float,
    capex: float,
    financial_expense: float,
    d_nwc: float,
    tax_rate: float,
) -> Dict[str, float]:
  '''Income statement and free cash flow lines shared by both passes.'''
  gross_profit = revenues - cogs
  ebit = gross_profit - sgna
  net_income = (ebit - financial_expense) * (1.0 - tax_rate)
  nopat = ebit * (1.0 - tax_rate)
  return {
      'gross_profit': gross_profit,
      'ebit': ebit,
      'financial_expense': financial_expense,
      'net_income': net_income,
      'operating_cf': net_income + depr - d_nwc,
      'nopat': nopat,
      'fcff': nopat + depr - capex - d_nwc,
  }


def compute_historical(
    scenario: Scenario,
    cfg: ModelAssumptions,
) -> Scenario:
  """
  Historical pass.

  Every year of the input scenario is treated as reported. Financial
  expense uses the reported figure when it is a non-zero number and is
  otherwise estimated as previous net debt * interest rate (the first year
  uses its own net debt).

  Args:
    scenario: Normalized scenario
    cfg: Resolved assumptions (interest_rate and tax_rate are used)

  Returns:
    New scenario with outputs filled in; inputs are copied, not modified
  """
  computed: Scenario = {}
  state = HistoricalState()

  for year in sorted_years(scenario):
    source = scenario[year]
    inputs = source.inputs

    net_debt = safe_num(
        _first_not_none(inputs.get('net_debt'),
                        _debt_from_components(inputs.get('debt_components'))))
    prev_net_debt = (state.prev_net_debt
                     if state.prev_net_debt is not None else net_debt)

    reported_fin_exp = safe_num(inputs.get('financial_expense'), None)
    if reported_fin_exp:
      financial_expense = reported_fin_exp
    else:
      financial_expense = prev_net_debt * cfg.interest_rate

    nwc = working_capital(inputs)
    d_nwc = nwc - state.prev_nwc

    outputs = _income_and_cash_flow(
        revenues=safe_num(inputs.get('revenues')),
        cogs=safe_num(inputs.get('cogs')),
        sgna=safe_num(inputs.get('sgna')),
        depr=safe_num(inputs.get('depr')),
        capex=safe_num(inputs.get('capex')),
        financial_expense=financial_expense,
        d_nwc=d_nwc,
        tax_rate=cfg.tax_rate,
    )
    outputs.update({'nwc': nwc, 'd_nwc': d_nwc})

    new_inputs = dict(inputs)
    new_inputs.update({
        'net_debt': net_debt,
        'debt': safe_num(inputs.get('debt'), None),
        'cash': safe_num(inputs.get('cash'), None),
    })
    computed[year] = ScenarioYear(raw=source.raw,
                                  inputs=new_inputs,
                                  outputs={**source.outputs, **outputs})

    state = HistoricalState(prev_nwc=nwc, prev_net_debt=net_debt)

  return computed


def _forecast_year(state: ForecastState, cfg: ModelAssumptions) -> ScenarioYear:
  '''Project one year from the state left by its predecessor.'''
  revenues = state.revenues * cfg.revenue_growth_multiplier
  cogs = revenues * cfg.cogs_pct
  sgna = revenues * cfg.sgna_pct
  capex = revenues * cfg.capex_pct

  # A strictly positive PPE rate always wins over the revenue-based rate.
  if cfg.depr_on_ppe_pct > 0:
    depr = state.ppe * cfg.depr_on_ppe_pct
  else:
    depr = revenues * cfg.depr_pct
  ppe = next_ppe(state.ppe, capex, depr)

  wc = project_working_capital(revenues, cogs, cfg)
  nwc = wc['receivables'] + wc['inventory'] - wc['payables']
  d_nwc = nwc - state.nwc

  net_debt = calc_net_debt(
      revenues=revenues,
      prev_debt=state.debt,
      prev_cash=state.cash,
      balance_growth_pct=cfg.balance_growth_pct,
      net_debt_pct_fallback=cfg.net_debt_pct,
  )

  if cfg.interest_rate > 0:
    financial_expense = safe_num(state.net_debt) * cfg.interest_rate
  else:
    financial_expense = revenues * cfg.fin_exp_pct

  outputs = _income_and_cash_flow(
      revenues=revenues,
      cogs=cogs,
      sgna=sgna,
      depr=depr,
      capex=capex,
      financial_expense=financial_expense,
      d_nwc=d_nwc,
      tax_rate=cfg.tax_rate,
  )

  cash_begin = safe_num(state.cash)
  if state.debt is not None:
    prev_gross_debt = safe_num(state.debt)
    gross_debt = prev_gross_debt * (1.0 + cfg.balance_growth_pct)
  else:
    if state.net_debt is not None and state.cash is not None:
      prev_gross_debt = safe_num(state.net_debt) + cash_begin
    else:
      prev_gross_debt = 0.0
    gross_debt = net_debt + cash_begin
  delta_gross_debt = gross_debt - prev_gross_debt

  cash_end = (cash_begin + outputs['operating_cf'] - capex + delta_gross_debt)

  inputs = {
      'revenues': revenues,
      'cogs': cogs,
      'sgna': sgna,
      'depr': depr,
      'financial_expense': financial_expense,
      'capex': capex,
      'ppe': ppe,
      **wc,
      'cash': cash_end,
      'net_debt': net_debt,
      # Reported gross debt carries over unchanged; gross_debt only drives
      # this year's cash roll-forward.
      'debt': state.debt,
  }
  outputs.update({
      'nwc': nwc,
      'd_nwc': d_nwc,
      'delta_gross_debt': delta_gross_debt,
      'cash_begin': cash_begin,
  })
  return ScenarioYear(raw=RawStatementYear(), inputs=inputs, outputs=outputs)


def compute_forecast(
    computed: Scenario,
    cfg: ModelAssumptions,
    last_year: int,
) -> Scenario:
  """
  Forecast pass.

  Projects cfg.forecast_years years after last_year. Each year is derived
  from the record of year - 1; if that record is missing, forecasting stops
  there and no later year is produced.

  Args:
    computed: Scenario after the historical pass
    cfg: Resolved assumptions
    last_year: Last reported year

  Returns:
    New scenario: the input years plus the projected ones
  """
  result: Scenario = dict(computed)
  state: Optional[ForecastState] = None

  for i in range(1, cfg.forecast_years + 1):
    year = str(last_year + i)
    prev_label = str(last_year + i - 1)
    prev = result.get(prev_label)
    if prev is None:
      logger.debug('Forecast stopped at %s: no record for %s', year,
                   prev_label)
      break
    if state is None:
      state = ForecastState.from_year(prev)

    projected = _forecast_year(state, cfg)
    result[year] = projected
    state = ForecastState.from_year(projected)

  return result


def compute_scenario(
    scenario: Scenario,
    params: Optional[ModelAssumptions] = None,
    defaults: Mapping[str, float] = DEFAULT_MODEL_PARAMS,
) -> Scenario:
  """
  Run the historical pass, then the forecast pass.

  Args:
    scenario: Normalized scenario (see normalize_statements)
    params: Assumptions; omitted fields take values from defaults
    defaults: Default assumption table

  Returns:
    Fully computed scenario (reported + projected years)
  """
  cfg = (params or ModelAssumptions()).resolved(defaults)
  computed = compute_historical(scenario, cfg)

  years = sorted_years(computed)
  if not years:
    return computed

  last_year = int(float(years[-1]))
  logger.debug('Projecting %d years after %d', cfg.forecast_years, last_year)
  return compute_forecast(computed, cfg, last_year)
