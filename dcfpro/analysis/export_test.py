import math

import pandas as pd
import pytest

from dcfpro.analysis.export import cashflows_to_frame
from dcfpro.analysis.export import export_scenario_csv
from dcfpro.analysis.export import scenario_to_frame
from dcfpro.engine.dcf import calculate_dcf_fcff
from dcfpro.engine.projector import compute_scenario
from dcfpro.normalize.statements import normalize_statements
from dcfpro.scenarios.config import DCFAssumptions
from dcfpro.scenarios.config import ModelAssumptions


@pytest.fixture
def scenario(raw_statements):
  return compute_scenario(normalize_statements(raw_statements),
                          ModelAssumptions(forecast_years=2))


class TestScenarioToFrame:
  """Tests for scenario_to_frame function."""

  def test_layout(self, scenario):
    df = scenario_to_frame(scenario)

    assert list(df.columns) == ['2021', '2022', '2023', '2024', '2025']
    assert df.index.name == 'line'
    assert df.loc['revenues', '2021'] == pytest.approx(1000.0)
    assert df.loc['fcff', '2025'] == pytest.approx(
        scenario['2025'].outputs['fcff'])
    assert df.attrs['historical_years'] == ['2021', '2022', '2023']

  def test_selected_items_keep_presentation_order(self, scenario):
    df = scenario_to_frame(scenario, items=['fcff', 'revenues'])

    assert list(df.index) == ['revenues', 'fcff']

  def test_missing_values_are_nan(self, raw_statements):
    df = scenario_to_frame(normalize_statements(raw_statements))

    assert math.isnan(df.loc['fcff', '2021'])


def test_cashflows_to_frame(scenario):
  result = calculate_dcf_fcff(scenario, DCFAssumptions())

  df = cashflows_to_frame(result)

  assert list(df['year']) == ['2024', '2025']
  assert list(df.columns) == ['year', 'fcff', 'discount_factor', 'present_value']
  assert df['present_value'].sum() == pytest.approx(result.pv_cashflows)


def test_export_scenario_csv(tmp_path, scenario):
  path = export_scenario_csv(scenario, tmp_path / 'out' / 'ABC.csv')

  df = pd.read_csv(path, index_col='line')
  assert path.exists()
  assert df.loc['revenues', '2024'] == pytest.approx(1210.0 * 1.05)
