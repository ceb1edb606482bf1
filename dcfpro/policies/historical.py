'''
Historical assumption policy.

Derives a default ModelAssumptions set from the ratios observed in a
company's reported years, so a forecast can start from "what the company
has been doing" rather than from the static defaults.
'''

from abc import ABC, abstractmethod
import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence

from dcfpro.domain.numbers import safe_num
from dcfpro.domain.types import PolicyOutput, Scenario
from dcfpro.scenarios.config import BOUNDS
from dcfpro.scenarios.config import DAYS_PER_YEAR
from dcfpro.scenarios.config import DEFAULT_MODEL_PARAMS
from dcfpro.scenarios.config import ModelAssumptions
from dcfpro.scenarios.config import clamp

logger = logging.getLogger(__name__)

# assumption field -> input line divided by revenues
REVENUE_RATIOS = {
    'cogs_pct': 'cogs',
    'sgna_pct': 'sgna',
    'capex_pct': 'capex',
    'receivables_pct': 'receivables',
    'inventory_pct': 'inventory',
    'payables_pct': 'payables',
    'depr_pct': 'depr',
    'fin_exp_pct': 'financial_expense',
}

# Left at their defaults: nothing in the history pins them down.
UNOBSERVED_FIELDS = ('net_debt_pct', 'balance_growth_pct', 'tax_rate',
                     'forecast_years', 'historical_years')


def mean(values: Sequence[float]) -> Optional[float]:
  '''Arithmetic mean, None for an empty sequence.'''
  if not values:
    return None
  return sum(values) / len(values)


def geometric_mean_growth(revenues: Sequence[float]) -> Optional[float]:
  '''
  Geometric mean of period-over-period revenue ratios.

  Expects revenues oldest first. Periods with a zero previous revenue are
  skipped, as are non-positive ratios (sign changes have no geometric
  mean).

  Returns:
    Growth multiplier (1.05 for +5% per year), or None with fewer than two
    points or no usable period
  '''
  if len(revenues) < 2:
    return None
  ratios = []
  for prev, cur in zip(revenues, revenues[1:]):
    if prev == 0:
      continue
    ratio = cur / prev
    if ratio > 0:
      ratios.append(ratio)
  if not ratios:
    return None
  return math.prod(ratios)**(1.0 / len(ratios))


def _value(inputs: Mapping, key: str) -> Optional[float]:
  return safe_num(inputs.get(key), None)


class AssumptionPolicy(ABC):
  '''
  Base class for policies producing a forecast assumption set.

  Subclasses implement compute() to return ModelAssumptions.
  '''

  @abstractmethod
  def compute(
      self,
      scenario: Scenario,
      hist_years: Sequence[str],
  ) -> PolicyOutput[ModelAssumptions]:
    '''
    Compute an assumption set.

    Args:
      scenario: Computed (or normalized) scenario
      hist_years: Historical year labels, oldest first

    Returns:
      PolicyOutput with the assumptions and diagnostics
    '''


class HistoricalAverager(AssumptionPolicy):
  """
  Averages of historical ratios.

  - Revenue ratios (COGS, SG&A, capex, working capital, legacy depreciation
    and financial expense): arithmetic mean over years with a finite value
    and a finite, non-zero revenue.
  - Depreciation on PPE and interest rate: mean of this year's value over
    last year's PPE / net debt, across consecutive year pairs.
  - Revenue growth: geometric mean of year-over-year revenue ratios.
  - DSO from revenues, DIO / DPO from COGS, averaged per year.

  Every value is clamped to its assumption bounds. A metric without any
  usable sample keeps its default.
  """

  def __init__(self, defaults: Mapping[str, float] = DEFAULT_MODEL_PARAMS):
    '''
    Initialize historical averager.

    Args:
      defaults: Default assumption table used for every fallback
    '''
    self.defaults = defaults

  def compute(
      self,
      scenario: Scenario,
      hist_years: Sequence[str],
  ) -> PolicyOutput[ModelAssumptions]:
    '''Average historical ratios into a full assumption set.'''
    if not hist_years:
      return PolicyOutput(value=ModelAssumptions.default(self.defaults),
                          diag={
                              'assumption_method': 'defaults',
                              'error': 'no_historical_years',
                          })

    samples: Dict[str, List[float]] = {
        name: [] for name in list(REVENUE_RATIOS) + [
            'depr_on_ppe_pct', 'interest_rate', 'receivables_days',
            'inventory_days', 'payables_days'
        ]
    }
    revenues_series: List[float] = []

    for year in hist_years:
      entry = scenario.get(year)
      if entry is None:
        continue
      inputs = entry.inputs
      revenues = _value(inputs, 'revenues')
      if revenues is None:
        revenues = _value(entry.outputs, 'revenues')
      if revenues is None:
        continue
      revenues_series.append(revenues)

      # Revenue-denominated samples need a non-zero revenue; DIO / DPO only
      # need COGS.
      if revenues != 0:
        for name, line in REVENUE_RATIOS.items():
          value = _value(inputs, line)
          if value is not None:
            samples[name].append(value / revenues)

        receivables = _value(inputs, 'receivables')
        if receivables is not None:
          samples['receivables_days'].append(receivables * DAYS_PER_YEAR /
                                             revenues)

      cogs = _value(inputs, 'cogs')
      if cogs:
        for name, line in (('inventory_days', 'inventory'),
                           ('payables_days', 'payables')):
          value = _value(inputs, line)
          if value is not None:
            samples[name].append(value * DAYS_PER_YEAR / cogs)

    for prev_year, year in zip(hist_years, hist_years[1:]):
      entry = scenario.get(year)
      prev_entry = scenario.get(prev_year)
      if entry is None or prev_entry is None:
        continue
      inputs = entry.inputs
      prev_inputs = prev_entry.inputs

      depr = _value(inputs, 'depr')
      prev_ppe = _value(prev_inputs, 'ppe')
      if depr is not None and prev_ppe:
        samples['depr_on_ppe_pct'].append(depr / prev_ppe)

      fin_exp = _value(inputs, 'financial_expense')
      prev_net_debt = _value(prev_inputs, 'net_debt')
      if prev_net_debt is None:
        prev_net_debt = _value(prev_inputs, 'debt')
      if fin_exp is not None and prev_net_debt:
        samples['interest_rate'].append(fin_exp / prev_net_debt)

    values: Dict[str, float] = {}
    fallbacks: List[str] = []
    for name, observed in samples.items():
      avg = mean(observed)
      if avg is None:
        fallbacks.append(name)
        values[name] = self.defaults[name]
      else:
        low, high = BOUNDS[name]
        values[name] = clamp(avg, low, high)

    growth = geometric_mean_growth(revenues_series)
    if growth is None:
      fallbacks.append('revenue_growth_multiplier')
      values['revenue_growth_multiplier'] = (
          self.defaults['revenue_growth_multiplier'])
    else:
      low, high = BOUNDS['revenue_growth_multiplier']
      values['revenue_growth_multiplier'] = clamp(growth, low, high)

    for name in UNOBSERVED_FIELDS:
      values[name] = self.defaults[name]

    if fallbacks:
      logger.debug('Historical averages fell back to defaults for %s',
                   fallbacks)

    return PolicyOutput(value=ModelAssumptions(**values),
                        diag={
                            'assumption_method': 'historical_average',
                            'years': list(hist_years),
                            'samples': {k: len(v) for k, v in samples.items()},
                            'revenue_points': len(revenues_series),
                            'fallbacks': fallbacks,
                        })


def compute_historical_averages(
    scenario: Scenario,
    hist_years: Sequence[str],
    defaults: Mapping[str, float] = DEFAULT_MODEL_PARAMS,
) -> ModelAssumptions:
  '''Shortcut for HistoricalAverager(defaults).compute(...).value.'''
  return HistoricalAverager(defaults).compute(scenario, hist_years).value
