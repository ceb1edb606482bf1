"""
Caching loaders for raw statements and company metadata.

Statements for a symbol are read from the first existing file among
<dir>/<SYMBOL>.json, <SYMBOL>.csv and <SYMBOL>.parquet:

  JSON: {year: {IS: {...}, BS: {...}, CF: {...}}}, optionally wrapped as
        {"symbol": ..., "name": ..., "statements": {...}}
  CSV / parquet: long format with columns year, statement, field, value

Company metadata (shares outstanding) comes from a companies.json file:
  {"companies": [{"symbol": ..., "name": ..., "shares_outstanding": ...}]}

Usage:
  loader = StatementsLoader(Path('data/statements'))
  statements = loader.load('TPE')
"""

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from dcfpro.domain.numbers import safe_num

logger = logging.getLogger(__name__)

LONG_FORMAT_COLUMNS = ['year', 'statement', 'field', 'value']
SUPPORTED_SUFFIXES = ('.json', '.csv', '.parquet')

RawStatements = Dict[str, Dict[str, Dict[str, Any]]]


def _year_label(value: Any) -> str:
  '''Canonical year label ("2023") from 2023, 2023.0, "2023", ...'''
  num = safe_num(value, None)
  if num is None or num != int(num):
    raise ValueError(f'Invalid year label: {value!r}')
  return str(int(num))


def statements_from_frame(df: pd.DataFrame) -> RawStatements:
  """
  Convert a long-format statements table into the nested raw mapping.

  Args:
    df: DataFrame with columns year, statement, field, value

  Returns:
    Mapping year -> statement -> field -> value

  Raises:
    ValueError: If required columns are missing or a year is malformed
  """
  missing = [c for c in LONG_FORMAT_COLUMNS if c not in df.columns]
  if missing:
    raise ValueError(f'Statements table is missing columns: {missing}')

  df = df.dropna(subset=['year', 'statement', 'field'])
  result: RawStatements = {}
  for row in df.itertuples(index=False):
    year = _year_label(row.year)
    value = None if pd.isna(row.value) else row.value
    result.setdefault(year, {}).setdefault(str(row.statement),
                                           {})[str(row.field)] = value
  return result


def statements_from_json(data: Any) -> RawStatements:
  '''Nested raw mapping from parsed JSON (bare or API-wrapped).'''
  if isinstance(data, dict) and isinstance(data.get('statements'), dict):
    data = data['statements']
  if not isinstance(data, dict):
    raise ValueError('Statements JSON must be an object keyed by year')
  return {_year_label(year): stmt for year, stmt in data.items()}


def load_statements_file(path: Path) -> RawStatements:
  """
  Load raw statements from a single file.

  Args:
    path: .json, .csv or .parquet file

  Returns:
    Mapping year -> statement -> field -> value

  Raises:
    FileNotFoundError: If the file does not exist
    ValueError: If the format is unsupported or the content malformed
  """
  if not path.exists():
    raise FileNotFoundError(f'Statements file not found: {path}')

  suffix = path.suffix.lower()
  if suffix == '.json':
    return statements_from_json(json.loads(path.read_text(encoding='utf-8')))
  if suffix == '.csv':
    return statements_from_frame(pd.read_csv(path))
  if suffix == '.parquet':
    return statements_from_frame(pd.read_parquet(path))
  raise ValueError(f'Unsupported statements format: {path.suffix} '
                   f'(expected one of {list(SUPPORTED_SUFFIXES)})')


class StatementsLoader:
  """
  Cached per-symbol statement source backed by a directory of files.

  Repeated load() calls for the same symbol do not touch the disk again.
  """

  def __init__(self, statements_dir: Path = Path('data/statements')):
    """
    Initialize statements loader.

    Args:
      statements_dir: Directory holding <SYMBOL>.json/.csv/.parquet files
    """
    self.statements_dir = statements_dir
    self._cache: Dict[str, RawStatements] = {}

  def path_for(self, symbol: str) -> Path:
    """
    First existing statements file for a symbol.

    The symbol is tried as given, then upper-cased.

    Raises:
      FileNotFoundError: If no supported file exists
    """
    for name in dict.fromkeys([symbol, symbol.upper()]):
      for suffix in SUPPORTED_SUFFIXES:
        path = self.statements_dir / f'{name}{suffix}'
        if path.exists():
          return path
    raise FileNotFoundError(
        f'No statements for {symbol} in {self.statements_dir} '
        f'(looked for {list(SUPPORTED_SUFFIXES)})')

  def load(self, symbol: str) -> RawStatements:
    """Load and cache statements for a symbol (cached case-insensitively)."""
    key = symbol.upper()
    if key in self._cache:
      return self._cache[key]

    path = self.path_for(symbol)
    statements = load_statements_file(path)
    logger.debug('Loaded %d years for %s from %s', len(statements), key, path)
    self._cache[key] = statements
    return statements

  def clear_cache(self) -> None:
    """Clear cached statements."""
    self._cache.clear()


@dataclass(frozen=True)
class CompanyInfo:
  '''
  Company metadata.

  Attributes:
    symbol: Ticker symbol
    name: Company name
    exchange: Listing exchange
    shares_outstanding: Share count (None if unknown)
  '''
  symbol: str
  name: str = ''
  exchange: Optional[str] = None
  shares_outstanding: Optional[float] = None


class CompanyRegistry:
  """
  Cached company metadata read from a companies.json file.
  """

  def __init__(self, companies_path: Path = Path('data/companies.json')):
    """
    Initialize company registry.

    Args:
      companies_path: Path to companies.json
    """
    self.companies_path = companies_path
    self._companies: Optional[Dict[str, CompanyInfo]] = None

  def load(self) -> Dict[str, CompanyInfo]:
    """
    Load and cache all companies keyed by symbol.

    Raises:
      FileNotFoundError: If companies.json does not exist
    """
    if self._companies is not None:
      return self._companies

    if not self.companies_path.exists():
      raise FileNotFoundError(f'Company list not found: {self.companies_path}')

    raw = json.loads(self.companies_path.read_text(encoding='utf-8'))
    entries: List[Dict[str, Any]] = (raw.get('companies', [])
                                     if isinstance(raw, dict) else raw)
    companies: Dict[str, CompanyInfo] = {}
    for entry in entries:
      symbol = str(entry.get('symbol', '')).upper().strip()
      if not symbol:
        continue
      companies[symbol] = CompanyInfo(
          symbol=symbol,
          name=str(entry.get('name', '')).strip(),
          exchange=entry.get('exchange'),
          shares_outstanding=safe_num(entry.get('shares_outstanding'), None),
      )
    self._companies = companies
    return companies

  def get(self, symbol: str) -> CompanyInfo:
    """
    Company metadata for a symbol.

    Raises:
      ValueError: If the symbol is unknown
    """
    companies = self.load()
    try:
      return companies[symbol.upper()]
    except KeyError as e:
      raise ValueError(f'Unknown company: {symbol}') from e

  def shares_outstanding(self, symbol: str) -> Optional[float]:
    """Shares outstanding for a symbol (None if not reported)."""
    return self.get(symbol).shares_outstanding
