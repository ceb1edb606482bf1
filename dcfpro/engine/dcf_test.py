import math

import pytest

from dcfpro.domain.types import ScenarioYear
from dcfpro.engine.dcf import calculate_dcf_fcff
from dcfpro.engine.dcf import compute_terminal_value
from dcfpro.engine.dcf import safe_denominator
from dcfpro.engine.projector import compute_scenario
from dcfpro.normalize.statements import normalize_statements
from dcfpro.scenarios.config import DCFAssumptions
from dcfpro.scenarios.config import ModelAssumptions


def _forecast_only(*years) -> dict:
  '''Scenario without any historical year: every entry is a forecast.'''
  return {
      str(2024 + i): ScenarioYear(inputs=dict(inputs), outputs=dict(outputs))
      for i, (inputs, outputs) in enumerate(years)
  }


class TestComputeTerminalValue:
  """Tests for compute_terminal_value function."""

  def test_gordon_growth(self):
    """TV = 100 * 1.02 / (0.10 - 0.02) = 1275, PV = 1275 / 1.1^2."""
    tv, pv = compute_terminal_value(final_fcff=100.0,
                                    perpetual_growth=0.02,
                                    wacc=0.10,
                                    final_year=2)

    assert tv == pytest.approx(1275.0)
    assert pv == pytest.approx(1275.0 / 1.21)

  def test_wacc_equal_to_growth_is_finite(self):
    tv, pv = compute_terminal_value(final_fcff=100.0,
                                    perpetual_growth=0.05,
                                    wacc=0.05,
                                    final_year=3)

    assert math.isfinite(tv)
    assert math.isfinite(pv)
    assert tv == pytest.approx(100.0 * 1.05 / 1e-6)


class TestSafeDenominator:
  """Tests for safe_denominator function."""

  def test_large_values_unchanged(self):
    assert safe_denominator(0.07) == 0.07
    assert safe_denominator(-0.07) == -0.07

  def test_small_values_floored_with_sign(self):
    assert safe_denominator(0.0) == 1e-6
    assert safe_denominator(1e-9) == 1e-6
    assert safe_denominator(-1e-9) == -1e-6


class TestCalculateDcfFcff:
  """Tests for calculate_dcf_fcff function."""

  def test_reference_valuation(self, single_year_scenario):
    """One forecast year with FCFF 162.525.

    Manual calculation (WACC 10%, g 2%):
    DF = 1 / 1.1, PV = 162.525 / 1.1 = 147.75
    TV = 162.525 * 1.02 / 0.08 = 2072.19375
    PV(TV) = 2072.19375 / 1.1 = 1883.8125
    EV = 147.75 + 1883.8125 = 2031.5625
    Equity = 2031.5625 - 210 = 1821.5625
    """
    scenario = compute_scenario(
        single_year_scenario,
        ModelAssumptions(revenue_growth_multiplier=1.05,
                         forecast_years=1,
                         cogs_pct=0.6,
                         sgna_pct=0.15,
                         depr_on_ppe_pct=0.08,
                         interest_rate=0.05,
                         tax_rate=0.19,
                         capex_pct=0.05))

    result = calculate_dcf_fcff(
        scenario, DCFAssumptions(wacc=0.10, perpetual_growth=0.02))

    assert len(result.cashflows) == 1
    assert result.cashflows[0].year == '2024'
    assert result.cashflows[0].fcff == pytest.approx(162.525)
    assert result.pv_cashflows == pytest.approx(147.75)
    assert result.terminal_value == pytest.approx(2072.19375)
    assert result.pv_terminal == pytest.approx(1883.8125)
    assert result.enterprise_value == pytest.approx(2031.5625)
    assert result.terminal_net_debt == pytest.approx(210.0)
    assert result.equity_value == pytest.approx(1821.5625)
    assert result.raw_equity == pytest.approx(result.equity_value)

  def test_no_forecast_years_returns_zeros(self, raw_statements):
    scenario = normalize_statements(raw_statements)

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert result.cashflows == []
    assert result.enterprise_value == 0.0
    assert result.terminal_value == 0.0
    assert result.equity_value == 0.0
    assert result.raw_equity == 0.0

  def test_empty_scenario(self):
    result = calculate_dcf_fcff({}, DCFAssumptions())

    assert result.cashflows == []
    assert result.enterprise_value == 0.0

  def test_discount_factors(self):
    scenario = _forecast_only(*[({}, {'ebit': 100.0})] * 3)

    result = calculate_dcf_fcff(scenario, DCFAssumptions(wacc=0.10))

    factors = [cf.discount_factor for cf in result.cashflows]
    assert factors == pytest.approx([1 / 1.1, 1 / 1.21, 1 / 1.331])
    for cf in result.cashflows:
      assert cf.present_value == pytest.approx(cf.fcff * cf.discount_factor)

  def test_enterprise_value_is_sum_of_parts(self, raw_statements):
    scenario = compute_scenario(normalize_statements(raw_statements),
                                ModelAssumptions(forecast_years=5))

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert [cf.year for cf in result.cashflows] == [
        '2024', '2025', '2026', '2027', '2028'
    ]
    assert result.enterprise_value == pytest.approx(result.pv_cashflows +
                                                    result.pv_terminal)
    assert result.raw_equity == pytest.approx(result.enterprise_value -
                                              result.terminal_net_debt)

  def test_wacc_equal_to_growth(self, raw_statements):
    scenario = compute_scenario(normalize_statements(raw_statements))

    result = calculate_dcf_fcff(
        scenario, DCFAssumptions(wacc=0.05, perpetual_growth=0.05))

    assert math.isfinite(result.terminal_value)
    assert math.isfinite(result.equity_value)

  def test_negative_equity_is_floored(self):
    scenario = _forecast_only(({'net_debt': 500.0}, {'ebit': 0.0, 'd_nwc': 0.0}))

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert result.raw_equity == pytest.approx(-500.0)
    assert result.equity_value == 0.0

  def test_ebit_recomputed_when_absent(self):
    """EBIT = 100 - 60 - 10 = 30, FCFF = 30 * 0.81 + 5 - 5 = 24.3."""
    scenario = _forecast_only(({
        'revenues': 100.0,
        'cogs': 60.0,
        'sgna': 10.0,
        'depr': 5.0,
        'capex': 5.0,
    }, {}))

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert result.cashflows[0].fcff == pytest.approx(24.3)

  def test_zero_ebit_is_not_recomputed(self):
    scenario = _forecast_only(({
        'revenues': 100.0,
        'cogs': 60.0,
        'sgna': 10.0,
    }, {'ebit': 0.0}))

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert result.cashflows[0].fcff == pytest.approx(0.0)

  def test_tax_rate_override(self):
    scenario = _forecast_only(({}, {'ebit': 100.0, 'd_nwc': 0.0}))

    result = calculate_dcf_fcff(scenario, DCFAssumptions(tax_rate=0.25))

    assert result.cashflows[0].fcff == pytest.approx(75.0)

  def test_nwc_change_without_precomputed_value(self):
    """dNWC is derived from consecutive years: (30 - 20) = 10."""
    scenario = _forecast_only(
        ({'receivables': 20.0}, {'ebit': 100.0}),
        ({'receivables': 30.0}, {'ebit': 100.0}),
    )

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert result.cashflows[0].fcff == pytest.approx(81.0)
    assert result.cashflows[1].fcff == pytest.approx(71.0)

  def test_terminal_net_debt_falls_back_to_debt(self):
    scenario = _forecast_only(({'debt': 50.0}, {'ebit': 0.0}))

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert result.terminal_net_debt == pytest.approx(50.0)

  def test_non_finite_inputs_never_raise(self):
    scenario = _forecast_only(({
        'revenues': float('nan'),
        'capex': 'n/a',
        'net_debt': float('inf'),
    }, {}))

    result = calculate_dcf_fcff(scenario, DCFAssumptions())

    assert result.enterprise_value == pytest.approx(0.0)
    assert result.terminal_net_debt == 0.0

  def test_deterministic(self, raw_statements):
    scenario = compute_scenario(normalize_statements(raw_statements),
                                ModelAssumptions(forecast_years=5))
    params = DCFAssumptions(wacc=0.1, perpetual_growth=0.02)

    first = calculate_dcf_fcff(scenario, params).to_dict()
    second = calculate_dcf_fcff(scenario, params).to_dict()

    assert first == second

  def test_to_dict_uses_wire_names(self, single_year_scenario):
    scenario = compute_scenario(single_year_scenario)

    data = calculate_dcf_fcff(scenario, DCFAssumptions()).to_dict()

    assert set(data) == {
        'pvCashflows', 'terminalValue', 'pvTerminal', 'enterpriseValue',
        'terminalNetDebt', 'rawEquity', 'equityValue', 'cashflows'
    }
    assert set(data['cashflows'][0]) == {
        'year', 'fcff', 'discountFactor', 'presentValue'
    }
