"""
Statement normalization.

Maps raw per-year statements with source-specific field names onto the
canonical per-year input record used by the projector. Simple keys are
resolved through the ordered alias table in normalize/aliases.py, composite
keys (SG&A, net financial expense, gross debt) are summed from their terms,
and net debt is derived as gross debt minus cash.

Pure and deterministic: the input mapping is never modified.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from dcfpro.domain.numbers import safe_num
from dcfpro.domain.types import RawStatementYear, Scenario, ScenarioYear
from dcfpro.domain.types import sorted_years
from dcfpro.normalize.aliases import COMPOSITE_SPECS
from dcfpro.normalize.aliases import FIELD_SPECS
from dcfpro.normalize.aliases import STATEMENT_KEYS

logger = logging.getLogger(__name__)


def pick_first_defined(
    obj: Optional[Mapping[str, Any]],
    candidates: Sequence[str],
) -> Any:
  '''
  Return the value of the first candidate key present and non-null in obj.

  Args:
    obj: Raw statement category (may be None)
    candidates: Ordered aliases

  Returns:
    The raw value, or None if no alias resolves
  '''
  if not obj:
    return None
  for name in candidates:
    value = obj.get(name)
    if value is not None:
      return value
  return None


def to_raw_year(stmt: Any) -> RawStatementYear:
  '''Build a RawStatementYear from a mapping using any accepted category
  names (IS / incomeStatement / income_statement, ...).'''
  if isinstance(stmt, RawStatementYear):
    return stmt
  stmt = stmt or {}
  categories: Dict[str, Dict[str, Any]] = {}
  for category, names in STATEMENT_KEYS.items():
    found = pick_first_defined(stmt, names)
    categories[category] = dict(found) if found else {}
  return RawStatementYear(**categories)


def _composite(category: Mapping[str, Any], terms) -> float:
  return sum(sign * safe_num(category.get(name)) for name, sign in terms)


def normalize_year(raw: RawStatementYear) -> Dict[str, Optional[float]]:
  '''
  Canonical input record for one year.

  net_debt is gross debt minus cash, where cash is the alias-resolved value
  (cash, cash_and_equivalents, ...) rather than only a literal "cash"
  field, so sources that name cash differently still net it out.

  Args:
    raw: Raw statements of the year

  Returns:
    Mapping canonical key -> float or None
  '''
  categories = {
      'income_statement': raw.income_statement,
      'balance_sheet': raw.balance_sheet,
      'cash_flow': raw.cash_flow,
  }
  inputs: Dict[str, Optional[float]] = {}

  for key, spec in FIELD_SPECS.items():
    value = pick_first_defined(categories[spec['statement']], spec['aliases'])
    inputs[key] = safe_num(value, None)

  for key, spec in COMPOSITE_SPECS.items():
    inputs[key] = _composite(categories[spec['statement']], spec['terms'])

  inputs['net_debt'] = inputs['debt'] - safe_num(inputs['cash'])
  return inputs


def normalize_statements(statements: Mapping[str, Any]) -> Scenario:
  """
  Build a historical scenario from raw statements.

  Args:
    statements: Mapping year label -> {IS, BS, CF} (or the long category
      names), each a mapping field name -> value

  Returns:
    Scenario keyed by year label in ascending order, with normalized inputs,
    empty outputs and the raw categories retained
  """
  scenario: Scenario = {}
  for year in sorted_years(statements):
    raw = to_raw_year(statements[year])
    scenario[year] = ScenarioYear(raw=raw,
                                  inputs=normalize_year(raw),
                                  outputs={})
    unresolved = [k for k, v in scenario[year].inputs.items() if v is None]
    if unresolved:
      logger.debug('%s: unresolved fields %s', year, unresolved)
  return scenario
