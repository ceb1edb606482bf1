"""
Numeric helpers used by the forecast pass.

calc_net_debt and next_ppe are the two small building blocks the projector
applies every forecast year. Both are total: missing values coerce to zero.
"""

from typing import Any, Optional

from dcfpro.domain.numbers import safe_num


def calc_net_debt(
    revenues: float,
    prev_debt: Optional[float] = None,
    prev_cash: Optional[float] = None,
    balance_growth_pct: float = 0.02,
    net_debt_pct_fallback: float = 0.2,
) -> float:
  """
  Net debt for a forecast year.

  When both the previous year's gross debt and cash are known, cash is grown
  by balance_growth_pct and subtracted from debt. Otherwise net debt is
  approximated as a share of revenues.

  Args:
    revenues: Revenues of the forecast year
    prev_debt: Previous year's gross debt (None if unknown)
    prev_cash: Previous year's cash (None if unknown)
    balance_growth_pct: Annual growth of non-modelled balance items
    net_debt_pct_fallback: Net debt as a fraction of revenues

  Returns:
    Net debt
  """
  if prev_debt is not None and prev_cash is not None:
    debt = safe_num(prev_debt)
    cash = safe_num(prev_cash) * (1.0 + safe_num(balance_growth_pct))
    return debt - cash
  return revenues * safe_num(net_debt_pct_fallback)


def next_ppe(prev_ppe: Any, capex: Any, depr: Any) -> float:
  '''PPE roll-forward: PPE_prev + capex - depreciation.'''
  return safe_num(prev_ppe) + safe_num(capex) - safe_num(depr)
