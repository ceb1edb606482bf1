"""Total numeric coercion used throughout the pipeline."""

from math import isfinite
from typing import Any, Optional


def safe_num(value: Any, fallback: Optional[float] = 0.0) -> Optional[float]:
  """
  Coerce a value to float, returning fallback when that is not possible.

  Args:
    value: Anything (number, numeric string, None, ...)
    fallback: Value returned for None, non-numeric or non-finite input

  Returns:
    float(value) when it is a finite number, otherwise fallback
  """
  if value is None or isinstance(value, bool):
    return fallback
  try:
    num = float(value)
  except (TypeError, ValueError):
    return fallback
  return num if isfinite(num) else fallback


def is_finite_number(value: Any) -> bool:
  '''True when value coerces to a finite float.'''
  return safe_num(value, None) is not None
