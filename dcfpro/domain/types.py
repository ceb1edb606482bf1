'''
Domain types for the forecasting and valuation pipeline.

These dataclasses are the seams between the normalizer, the projector, the
historical averager and the DCF valuator. Year labels are integer-valued
strings ("2023"); computations always visit them in ascending numeric order.
'''

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

T = TypeVar('T')


@dataclass
class PolicyOutput(Generic[T]):
  '''
  Computed value plus diagnostics explaining how it was obtained.

  Attributes:
    value: The computed value
    diag: Dictionary of diagnostic information
  '''
  value: T
  diag: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RawStatementYear:
  '''
  One year of raw, source-specific statement data.

  Field names inside each category are arbitrary; the normalizer maps them
  onto canonical keys.

  Attributes:
    income_statement: Income statement fields
    balance_sheet: Balance sheet fields
    cash_flow: Cash flow statement fields
  '''
  income_statement: Mapping[str, Any] = field(default_factory=dict)
  balance_sheet: Mapping[str, Any] = field(default_factory=dict)
  cash_flow: Mapping[str, Any] = field(default_factory=dict)

  @property
  def has_income_statement(self) -> bool:
    return len(self.income_statement) > 0


@dataclass
class ScenarioYear:
  '''
  One year of a scenario.

  Attributes:
    raw: Raw statements (empty for forecast years)
    inputs: Canonical line items (normalized or projected)
    outputs: Derived metrics (gross profit, EBIT, FCFF, ...)
  '''
  raw: RawStatementYear = field(default_factory=RawStatementYear)
  inputs: Dict[str, Any] = field(default_factory=dict)
  outputs: Dict[str, Optional[float]] = field(default_factory=dict)

  @property
  def is_historical(self) -> bool:
    '''A year is historical iff it carries a non-empty income statement.'''
    return self.raw.has_income_statement


Scenario = Dict[str, ScenarioYear]


def sorted_years(scenario: Mapping[str, Any]) -> List[str]:
  '''Year labels in ascending numeric order.'''
  return sorted(scenario.keys(), key=float)


@dataclass(frozen=True)
class DCFCashflow:
  '''
  Discounted free cash flow of a single forecast year.

  Attributes:
    year: Year label
    fcff: Free cash flow to the firm
    discount_factor: 1 / (1 + WACC)^t
    present_value: fcff * discount_factor
  '''
  year: str
  fcff: float
  discount_factor: float
  present_value: float


@dataclass
class DCFResult:
  '''
  Result of an FCFF-based DCF valuation.

  equity_value is floored at zero and is the figure to display or derive a
  per-share price from. raw_equity keeps the unfloored value and is the one
  to use when a negative equity outcome matters.

  Attributes:
    pv_cashflows: Sum of discounted forecast cash flows
    terminal_value: Undiscounted terminal value
    pv_terminal: Discounted terminal value
    enterprise_value: pv_cashflows + pv_terminal
    terminal_net_debt: Net debt of the last forecast year
    raw_equity: enterprise_value - terminal_net_debt (may be negative)
    equity_value: max(raw_equity, 0)
    cashflows: Per-year discounted cash flows in year order
  '''
  pv_cashflows: float = 0.0
  terminal_value: float = 0.0
  pv_terminal: float = 0.0
  enterprise_value: float = 0.0
  terminal_net_debt: float = 0.0
  raw_equity: float = 0.0
  equity_value: float = 0.0
  cashflows: List[DCFCashflow] = field(default_factory=list)

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to the camelCase wire shape consumed by presentation code.'''
    return {
        'pvCashflows': self.pv_cashflows,
        'terminalValue': self.terminal_value,
        'pvTerminal': self.pv_terminal,
        'enterpriseValue': self.enterprise_value,
        'terminalNetDebt': self.terminal_net_debt,
        'rawEquity': self.raw_equity,
        'equityValue': self.equity_value,
        'cashflows': [{
            'year': cf.year,
            'fcff': cf.fcff,
            'discountFactor': cf.discount_factor,
            'presentValue': cf.present_value,
        } for cf in self.cashflows],
    }


@dataclass
class ValuationResult:
  '''
  End-to-end valuation output.

  Attributes:
    dcf: DCF result
    scenario: Fully computed scenario (historical + forecast)
    equity_per_share: equity_value * 1000 / shares (None if shares unknown)
    shares_outstanding: Share count used for the per-share figure
    diag: Assumptions used and other diagnostics
  '''
  dcf: DCFResult
  scenario: Scenario
  equity_per_share: Optional[float] = None
  shares_outstanding: Optional[float] = None
  diag: Dict[str, Any] = field(default_factory=dict)

  def to_dict(self) -> Dict[str, Any]:
    '''Flatten headline figures and diagnostics for tabular output.'''
    result: Dict[str, Any] = {
        'pv_cashflows': self.dcf.pv_cashflows,
        'terminal_value': self.dcf.terminal_value,
        'pv_terminal': self.dcf.pv_terminal,
        'enterprise_value': self.dcf.enterprise_value,
        'terminal_net_debt': self.dcf.terminal_net_debt,
        'raw_equity': self.dcf.raw_equity,
        'equity_value': self.dcf.equity_value,
        'equity_per_share': self.equity_per_share,
        'shares_outstanding': self.shares_outstanding,
    }
    result.update(self.diag)
    return result


def historical_years(scenario: Scenario) -> List[str]:
  '''Historical year labels (non-empty income statement), ascending.'''
  return [y for y in sorted_years(scenario) if scenario[y].is_historical]


def last_historical_year(scenario: Scenario) -> Optional[str]:
  '''Label of the latest historical year, or None if there is none.'''
  years = historical_years(scenario)
  return years[-1] if years else None


def forecast_years(scenario: Scenario) -> List[str]:
  '''
  Year labels strictly after the last historical year, ascending.

  When the scenario holds no historical year at all, every year counts as a
  forecast year.
  '''
  last = last_historical_year(scenario)
  years = sorted_years(scenario)
  if last is None:
    return years
  return [y for y in years if float(y) > float(last)]


def select_historical_window(scenario: Scenario, n: int) -> List[str]:
  '''The n most recent historical years, oldest first.'''
  years = historical_years(scenario)
  if n <= 0:
    return []
  return years[-n:]
