"""
Sensitivity analysis for DCF valuation.

Builds 2D tables showing how a valuation figure (equity value by default)
varies across discount rates and perpetual growth rates for one computed
scenario. The forecast itself is not recomputed: only the discounting
assumptions change between cells.

Usage:
  builder = SensitivityTableBuilder(scenario, tax_rate=0.19)
  table = builder.build([0.08, 0.09, 0.10], [0.01, 0.02, 0.03])
"""

import logging
from typing import List, Optional

import pandas as pd

from dcfpro.domain.types import DCFResult, Scenario
from dcfpro.engine.dcf import calculate_dcf_fcff
from dcfpro.scenarios.config import DCFAssumptions

logger = logging.getLogger(__name__)

VALUE_FIELDS = ('equity_value', 'raw_equity', 'enterprise_value',
                'pv_terminal', 'terminal_value', 'pv_cashflows')


class SensitivityTableBuilder:
  """
  Build WACC x perpetual growth sensitivity tables for a scenario.
  """

  def __init__(self, scenario: Scenario, tax_rate: Optional[float] = None):
    """
    Initialize sensitivity table builder.

    Args:
        scenario: Fully computed scenario (historical + forecast)
        tax_rate: Tax rate passed to every DCF run (None = valuator default)
    """
    self.scenario = scenario
    self.tax_rate = tax_rate

  def value_at(self, wacc: float, perpetual_growth: float) -> DCFResult:
    """DCF result for a single grid cell."""
    return calculate_dcf_fcff(
        self.scenario,
        DCFAssumptions(wacc=wacc,
                       perpetual_growth=perpetual_growth,
                       tax_rate=self.tax_rate))

  def build(
      self,
      waccs: List[float],
      growth_rates: List[float],
      value: str = 'equity_value',
  ) -> pd.DataFrame:
    """
    Build 2D sensitivity table.

    Args:
        waccs: Discount rates (rows)
        growth_rates: Perpetual growth rates (columns)
        value: DCFResult field reported in each cell

    Returns:
        DataFrame indexed by WACC with one column per growth rate

    Raises:
        ValueError: If a grid axis is empty or value is not a DCFResult field
    """
    if not waccs:
      raise ValueError('waccs cannot be empty')
    if not growth_rates:
      raise ValueError('growth_rates cannot be empty')
    if value not in VALUE_FIELDS:
      raise ValueError(f'Unknown value field: {value!r}. '
                       f'Available: {list(VALUE_FIELDS)}')

    logger.info('Building sensitivity table: %d x %d', len(waccs),
                len(growth_rates))

    data_rows = []
    for wacc in waccs:
      data_rows.append([
          getattr(self.value_at(wacc, g), value) for g in growth_rates
      ])

    df = pd.DataFrame(data_rows,
                      index=pd.Index(waccs, name='wacc'),
                      columns=pd.Index(growth_rates, name='perpetual_growth'))
    return df
