import pytest

from dcfpro.engine.financials import calc_net_debt
from dcfpro.engine.financials import next_ppe


class TestCalcNetDebt:
  """Tests for calc_net_debt function."""

  def test_debt_and_cash_known(self):
    """Cash grows by balance growth before being netted.

    Manual calculation:
    500 - 100 * 1.02 = 398
    """
    result = calc_net_debt(revenues=1000.0,
                           prev_debt=500.0,
                           prev_cash=100.0,
                           balance_growth_pct=0.02,
                           net_debt_pct_fallback=0.2)

    assert result == pytest.approx(398.0)

  def test_zero_debt_is_known(self):
    """A zero debt is a known value, not a missing one."""
    result = calc_net_debt(revenues=1000.0, prev_debt=0.0, prev_cash=50.0)

    assert result == pytest.approx(-51.0)

  def test_missing_cash_uses_revenue_fallback(self):
    result = calc_net_debt(revenues=1000.0,
                           prev_debt=500.0,
                           prev_cash=None,
                           net_debt_pct_fallback=0.25)

    assert result == pytest.approx(250.0)

  def test_missing_debt_uses_revenue_fallback(self):
    result = calc_net_debt(revenues=800.0, prev_cash=10.0)

    assert result == pytest.approx(160.0)


class TestNextPPE:
  """Tests for next_ppe function."""

  def test_roll_forward(self):
    assert next_ppe(500.0, 60.0, 40.0) == pytest.approx(520.0)

  def test_missing_values_count_as_zero(self):
    assert next_ppe(None, 60.0, float('nan')) == pytest.approx(60.0)
