"""
Tabular views of scenarios and DCF results.

Rows are line items, columns are years (ascending), which is how the
statements are usually read. Values are left unformatted.
"""

from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from dcfpro.domain.types import DCFResult, Scenario
from dcfpro.domain.types import sorted_years

# Line items in presentation order: (row label, source, key)
LINE_ITEMS = [
    ('revenues', 'inputs', 'revenues'),
    ('cogs', 'inputs', 'cogs'),
    ('gross_profit', 'outputs', 'gross_profit'),
    ('sgna', 'inputs', 'sgna'),
    ('ebit', 'outputs', 'ebit'),
    ('financial_expense', 'outputs', 'financial_expense'),
    ('net_income', 'outputs', 'net_income'),
    ('ppe', 'inputs', 'ppe'),
    ('receivables', 'inputs', 'receivables'),
    ('inventory', 'inputs', 'inventory'),
    ('payables', 'inputs', 'payables'),
    ('cash', 'inputs', 'cash'),
    ('debt', 'inputs', 'debt'),
    ('net_debt', 'inputs', 'net_debt'),
    ('capex', 'inputs', 'capex'),
    ('depr', 'inputs', 'depr'),
    ('d_nwc', 'outputs', 'd_nwc'),
    ('operating_cf', 'outputs', 'operating_cf'),
    ('fcff', 'outputs', 'fcff'),
]


def scenario_to_frame(
    scenario: Scenario,
    items: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
  """
  Scenario as a line item x year table.

  Args:
    scenario: Computed scenario
    items: Row labels to include (default: all LINE_ITEMS)

  Returns:
    DataFrame with line items as index and years as columns; the
    historical year labels are kept in df.attrs['historical_years']
  """
  selected = [li for li in LINE_ITEMS if items is None or li[0] in items]
  years = sorted_years(scenario)
  data = {}
  for year in years:
    entry = scenario[year]
    column: List[Optional[float]] = []
    for _, source, key in selected:
      values = entry.inputs if source == 'inputs' else entry.outputs
      column.append(values.get(key))
    data[year] = column

  df = pd.DataFrame(data,
                    index=pd.Index([li[0] for li in selected], name='line'),
                    columns=years,
                    dtype=float)
  df.attrs['historical_years'] = [y for y in years if scenario[y].is_historical]
  return df


def cashflows_to_frame(result: DCFResult) -> pd.DataFrame:
  '''Discounted cash flows, one row per forecast year.'''
  return pd.DataFrame(
      [{
          'year': cf.year,
          'fcff': cf.fcff,
          'discount_factor': cf.discount_factor,
          'present_value': cf.present_value,
      } for cf in result.cashflows],
      columns=['year', 'fcff', 'discount_factor', 'present_value'],
  )


def export_scenario_csv(scenario: Scenario, path: Path) -> Path:
  '''Write scenario_to_frame(scenario) to CSV and return the path.'''
  path.parent.mkdir(parents=True, exist_ok=True)
  scenario_to_frame(scenario).to_csv(path)
  return path
