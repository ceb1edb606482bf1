"""
Forecast and DCF assumption sets.

ModelAssumptions holds every knob of the projector. All fields are optional:
None means "not set by the caller" and is replaced by the matching entry of
DEFAULT_MODEL_PARAMS when the assumptions are resolved. Resolution also
applies the clamps, so the projector only ever sees sanitized values.

Both dataclasses are JSON-friendly. from_dict accepts the snake_case field
names as well as the camelCase names used by the presentation layer.
"""

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import fields
import json
import math
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from dcfpro.domain.numbers import safe_num

DAYS_PER_YEAR = 365.0
MAX_DAYS = 5 * DAYS_PER_YEAR
DEFAULT_DCF_TAX_RATE = 0.19

DEFAULT_MODEL_PARAMS: Mapping[str, float] = MappingProxyType({
    # global / growth
    'revenue_growth_multiplier': 1.05,
    'forecast_years': 3,
    'historical_years': 3,
    # income statement, % of revenues
    'cogs_pct': 0.60,
    'sgna_pct': 0.15,
    'capex_pct': 0.05,
    # depreciation: % of previous PPE, or legacy % of revenues
    'depr_on_ppe_pct': 0.08,
    'depr_pct': 0.05,
    # financial expense: rate on previous net debt, or legacy % of revenues
    'interest_rate': 0.05,
    'fin_exp_pct': 0.02,
    # working capital, % of revenues
    'receivables_pct': 0.10,
    'inventory_pct': 0.08,
    'payables_pct': 0.06,
    # working capital, days (DSO / DIO / DPO)
    'receivables_days': 0.10 * DAYS_PER_YEAR,
    'inventory_days': 0.08 * DAYS_PER_YEAR,
    'payables_days': 0.06 * DAYS_PER_YEAR,
    # debt & balance sheet
    'net_debt_pct': 0.20,
    'balance_growth_pct': 0.02,
    'tax_rate': 0.19,
})

# (low, high) bounds applied on resolution.
BOUNDS: Mapping[str, tuple] = MappingProxyType({
    'revenue_growth_multiplier': (0.5, 2.0),
    'forecast_years': (1, 10),
    'historical_years': (1, 50),
    'cogs_pct': (0.0, 1.0),
    'sgna_pct': (0.0, 1.0),
    'capex_pct': (0.0, 1.0),
    'depr_on_ppe_pct': (0.0, 1.0),
    'depr_pct': (0.0, 1.0),
    'interest_rate': (0.0, 1.0),
    'fin_exp_pct': (0.0, 1.0),
    'receivables_pct': (0.0, 1.0),
    'inventory_pct': (0.0, 1.0),
    'payables_pct': (0.0, 1.0),
    'receivables_days': (0.0, MAX_DAYS),
    'inventory_days': (0.0, MAX_DAYS),
    'payables_days': (0.0, MAX_DAYS),
    'net_debt_pct': (0.0, 5.0),
    'balance_growth_pct': (0.0, 1.0),
    'tax_rate': (0.0, 1.0),
})

# Integer-valued fields; a non-finite value falls back to the default
# rather than to zero.
_COUNT_FIELDS = ('forecast_years', 'historical_years')
_DEFAULT_ON_NAN = ('revenue_growth_multiplier',) + _COUNT_FIELDS


def clamp(value: Any, low: float, high: float, fallback: float = 0.0) -> float:
  '''Clamp to [low, high]; non-finite input maps to fallback first.'''
  num = safe_num(value, fallback)
  return min(max(num, low), high)


def _camel(name: str) -> str:
  head, *rest = name.split('_')
  return head + ''.join(part.capitalize() for part in rest)


def _key_map(cls) -> Dict[str, str]:
  '''Accepted input key -> field name, for snake_case and camelCase keys.'''
  mapping: Dict[str, str] = {}
  for f in fields(cls):
    mapping[f.name] = f.name
    mapping[_camel(f.name)] = f.name
  return mapping


def _from_mapping(cls, data: Mapping[str, Any]):
  key_map = _key_map(cls)
  kwargs = {}
  for key, value in data.items():
    try:
      kwargs[key_map[key]] = value
    except KeyError as e:
      raise KeyError(f"Unknown {cls.__name__} key: '{key}'. "
                     f'Available: {sorted(key_map.keys())}') from e
  return cls(**kwargs)


@dataclass(frozen=True)
class ModelAssumptions:
  """
  Forecast assumptions.

  Percentages are fractions (0.6 = 60%); the growth multiplier is stored as
  a multiplier (1.05 = +5% per year). Day counts are DSO / DIO / DPO.

  Attributes:
    revenue_growth_multiplier: Revenue_t = Revenue_{t-1} * multiplier
    forecast_years: Number of projected years
    historical_years: How many recent historical years feed the averager
    cogs_pct: COGS as % of revenues
    sgna_pct: SG&A as % of revenues
    capex_pct: Capex as % of revenues
    depr_on_ppe_pct: Depreciation as % of previous PPE (preferred)
    depr_pct: Depreciation as % of revenues (used when depr_on_ppe_pct is 0)
    interest_rate: Financial expense as % of previous net debt (preferred)
    fin_exp_pct: Financial expense as % of revenues (used when rate is 0)
    receivables_pct: Receivables as % of revenues
    inventory_pct: Inventory as % of revenues (fallback when COGS is 0)
    payables_pct: Payables as % of revenues (fallback when COGS is 0)
    receivables_days: Receivables = revenues * days / 365
    inventory_days: Inventory = COGS * days / 365
    payables_days: Payables = COGS * days / 365
    net_debt_pct: Net debt as % of revenues when debt/cash are unknown
    balance_growth_pct: Yearly growth of cash and gross debt
    tax_rate: Income tax rate
  """
  revenue_growth_multiplier: Optional[float] = None
  forecast_years: Optional[int] = None
  historical_years: Optional[int] = None
  cogs_pct: Optional[float] = None
  sgna_pct: Optional[float] = None
  capex_pct: Optional[float] = None
  depr_on_ppe_pct: Optional[float] = None
  depr_pct: Optional[float] = None
  interest_rate: Optional[float] = None
  fin_exp_pct: Optional[float] = None
  receivables_pct: Optional[float] = None
  inventory_pct: Optional[float] = None
  payables_pct: Optional[float] = None
  receivables_days: Optional[float] = None
  inventory_days: Optional[float] = None
  payables_days: Optional[float] = None
  net_debt_pct: Optional[float] = None
  balance_growth_pct: Optional[float] = None
  tax_rate: Optional[float] = None

  @classmethod
  def default(
      cls,
      defaults: Mapping[str, float] = DEFAULT_MODEL_PARAMS,
  ) -> 'ModelAssumptions':
    """Assumption set with every field taken from defaults."""
    return cls(**{f.name: defaults[f.name] for f in fields(cls)})

  def resolved(
      self,
      defaults: Mapping[str, float] = DEFAULT_MODEL_PARAMS,
  ) -> 'ModelAssumptions':
    """
    Substitute defaults for omitted fields and apply all clamps.

    Args:
      defaults: Default table (DEFAULT_MODEL_PARAMS unless injected)

    Returns:
      ModelAssumptions with every field set and within BOUNDS
    """
    values: Dict[str, Any] = {}
    for f in fields(self):
      default = defaults[f.name]
      raw = getattr(self, f.name)
      if raw is None:
        raw = default
      low, high = BOUNDS[f.name]
      fallback = safe_num(default) if f.name in _DEFAULT_ON_NAN else 0.0
      if f.name in _COUNT_FIELDS:
        values[f.name] = int(math.floor(clamp(raw, low, high, fallback) + 0.5))
      else:
        values[f.name] = clamp(raw, low, high, fallback)
    return ModelAssumptions(**values)

  def merged(self, overrides: 'ModelAssumptions') -> 'ModelAssumptions':
    '''Copy of self with every non-None field of overrides applied on top.'''
    values = asdict(self)
    values.update({k: v for k, v in asdict(overrides).items() if v is not None})
    return ModelAssumptions(**values)

  def to_dict(self) -> Dict[str, Any]:
    """Convert to dictionary."""
    return asdict(self)

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> 'ModelAssumptions':
    """Create from dictionary (snake_case or camelCase keys)."""
    return _from_mapping(cls, data)

  @classmethod
  def from_json(cls, json_str: str) -> 'ModelAssumptions':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))


@dataclass(frozen=True)
class DCFAssumptions:
  """
  DCF discounting assumptions.

  Attributes:
    wacc: Discount rate applied to FCFF
    perpetual_growth: Growth rate of the terminal perpetuity
    tax_rate: Optional override for the NOPAT tax rate
  """
  wacc: float = 0.09
  perpetual_growth: float = 0.02
  tax_rate: Optional[float] = None

  @property
  def effective_tax_rate(self) -> float:
    '''tax_rate if set and finite, otherwise the 19% fallback.'''
    return safe_num(self.tax_rate, DEFAULT_DCF_TAX_RATE)

  def to_dict(self) -> Dict[str, Any]:
    """Convert to dictionary."""
    return asdict(self)

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> 'DCFAssumptions':
    """Create from dictionary (snake_case or camelCase keys)."""
    return _from_mapping(cls, data)

  @classmethod
  def from_json(cls, json_str: str) -> 'DCFAssumptions':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))
