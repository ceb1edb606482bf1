'''
Single-company valuation entrypoint.

This module wires the pipeline together:
1. Normalizes raw statements into a historical scenario
2. Optionally derives assumptions from the most recent historical years
3. Projects the forecast years
4. Runs the DCF and derives a per-share value

Usage:
  from dcfpro.run import run_valuation
  from dcfpro.scenarios.config import DCFAssumptions, ModelAssumptions

  result = run_valuation(
    statements,
    model=ModelAssumptions(forecast_years=5),
    dcf=DCFAssumptions(wacc=0.09, perpetual_growth=0.02),
    shares_outstanding=12_500,
  )
  print(f"Equity: {result.dcf.equity_value:,.0f}")
'''

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dcfpro.data_loader import CompanyRegistry
from dcfpro.data_loader import StatementsLoader
from dcfpro.data_loader import load_statements_file
from dcfpro.domain.numbers import safe_num
from dcfpro.domain.types import ValuationResult
from dcfpro.domain.types import select_historical_window
from dcfpro.engine.dcf import calculate_dcf_fcff
from dcfpro.engine.projector import compute_scenario
from dcfpro.normalize.statements import normalize_statements
from dcfpro.policies.historical import HistoricalAverager
from dcfpro.scenarios.config import DEFAULT_MODEL_PARAMS
from dcfpro.scenarios.config import DCFAssumptions
from dcfpro.scenarios.config import ModelAssumptions

logger = logging.getLogger(__name__)

# Valuations are expressed in thousands of currency units.
VALUE_UNIT = 1000.0


def equity_per_share(
    equity_value: float,
    shares_outstanding: Optional[float],
) -> Optional[float]:
  '''equity_value * 1000 / shares, or None without a positive share count.'''
  shares = safe_num(shares_outstanding, None)
  if shares is None or shares <= 0:
    return None
  return equity_value * VALUE_UNIT / shares


def run_valuation(
    statements: Mapping[str, Any],
    model: Optional[ModelAssumptions] = None,
    dcf: Optional[DCFAssumptions] = None,
    shares_outstanding: Optional[float] = None,
    use_historical_defaults: bool = False,
    defaults: Mapping[str, float] = DEFAULT_MODEL_PARAMS,
) -> ValuationResult:
  '''
  Run the full pipeline for one company.

  Args:
    statements: Raw statements, year -> {IS, BS, CF}
    model: Forecast assumptions; unset fields use defaults (or the
      historical averages when use_historical_defaults is True)
    dcf: DCF assumptions; when tax_rate is unset the model tax rate is used
    shares_outstanding: Share count for the per-share value
    use_historical_defaults: Derive unset assumptions from history
    defaults: Default assumption table

  Returns:
    ValuationResult with the computed scenario, DCF result and diagnostics
  '''
  model = model or ModelAssumptions()
  dcf = dcf or DCFAssumptions()

  historical = normalize_statements(statements)
  diag: Dict[str, Any] = {'historical_years': list(historical.keys())}

  if use_historical_defaults:
    window = select_historical_window(historical,
                                      model.resolved(defaults).historical_years)
    averages = HistoricalAverager(defaults).compute(historical, window)
    diag.update({f'averager_{k}': v for k, v in averages.diag.items()})
    model = averages.value.merged(model)

  resolved = model.resolved(defaults)
  if dcf.tax_rate is None:
    dcf = DCFAssumptions(wacc=dcf.wacc,
                         perpetual_growth=dcf.perpetual_growth,
                         tax_rate=resolved.tax_rate)

  scenario = compute_scenario(historical, resolved, defaults)
  dcf_result = calculate_dcf_fcff(scenario, dcf)

  diag.update({f'model_{k}': v for k, v in resolved.to_dict().items()})
  diag.update({f'dcf_{k}': v for k, v in dcf.to_dict().items()})

  return ValuationResult(
      dcf=dcf_result,
      scenario=scenario,
      equity_per_share=equity_per_share(dcf_result.equity_value,
                                        shares_outstanding),
      shares_outstanding=safe_num(shares_outstanding, None),
      diag=diag,
  )


def _model_from_args(args: argparse.Namespace) -> ModelAssumptions:
  data: Dict[str, Any] = {}
  if args.assumptions:
    data.update(json.loads(Path(args.assumptions).read_text(encoding='utf-8')))
  model = ModelAssumptions.from_dict(data)
  overrides = ModelAssumptions(
      forecast_years=args.forecast_years,
      revenue_growth_multiplier=args.growth,
      historical_years=args.historical_years,
  )
  return model.merged(overrides)


def main() -> None:
  '''CLI entrypoint.'''
  parser = argparse.ArgumentParser(description='Run FCFF DCF valuation')
  parser.add_argument('--statements',
                      type=Path,
                      required=True,
                      help='Statements file, or directory of <SYMBOL> files')
  parser.add_argument('--symbol',
                      type=str,
                      default=None,
                      help='Company symbol (required with a directory)')
  parser.add_argument('--companies',
                      type=Path,
                      default=None,
                      help='companies.json with shares outstanding')
  parser.add_argument('--assumptions',
                      type=str,
                      default=None,
                      help='JSON file with model assumptions')
  parser.add_argument('--wacc', type=float, default=0.09, help='WACC')
  parser.add_argument('--perpetual-growth',
                      type=float,
                      default=0.02,
                      help='Terminal growth rate')
  parser.add_argument('--tax-rate',
                      type=float,
                      default=None,
                      help='Tax rate override for NOPAT')
  parser.add_argument('--forecast-years', type=int, default=None)
  parser.add_argument('--growth',
                      type=float,
                      default=None,
                      help='Revenue growth multiplier (1.05 = +5%%)')
  parser.add_argument('--historical-years', type=int, default=None)
  parser.add_argument('--historical-defaults',
                      action='store_true',
                      help='Derive unset assumptions from history')
  args = parser.parse_args()

  if args.statements.is_dir():
    if not args.symbol:
      parser.error('--symbol is required when --statements is a directory')
    statements = StatementsLoader(args.statements).load(args.symbol)
  else:
    statements = load_statements_file(args.statements)

  shares = None
  if args.companies and args.symbol:
    shares = CompanyRegistry(args.companies).shares_outstanding(args.symbol)

  result = run_valuation(
      statements,
      model=_model_from_args(args),
      dcf=DCFAssumptions(wacc=args.wacc,
                         perpetual_growth=args.perpetual_growth,
                         tax_rate=args.tax_rate),
      shares_outstanding=shares,
      use_historical_defaults=args.historical_defaults,
  )

  separator = '=' * 70
  logger.info('\n%s', separator)
  logger.info('FCFF DCF Valuation - %s', args.symbol or args.statements.name)
  logger.info(separator)

  logger.info('\nForecast Cash Flows:')
  for cf in result.dcf.cashflows:
    logger.info('  %s  FCFF %14.1f  DF %.4f  PV %14.1f', cf.year, cf.fcff,
                cf.discount_factor, cf.present_value)

  logger.info('\nValuation Result:')
  logger.info('  PV of cash flows: %.1f', result.dcf.pv_cashflows)
  logger.info('  Terminal value: %.1f', result.dcf.terminal_value)
  logger.info('  PV of terminal value: %.1f', result.dcf.pv_terminal)
  logger.info('  Enterprise value: %.1f', result.dcf.enterprise_value)
  logger.info('  Terminal net debt: %.1f', result.dcf.terminal_net_debt)
  logger.info('  Equity value (raw): %.1f', result.dcf.raw_equity)
  logger.info('  Equity value: %.1f', result.dcf.equity_value)
  if result.equity_per_share is not None:
    logger.info('  Equity per share: %.2f', result.equity_per_share)
  else:
    logger.info('  Equity per share: n/a (shares outstanding unknown)')

  logger.info('%s\n', separator)


if __name__ == '__main__':
  logging.basicConfig(
      level=logging.INFO,
      format='%(message)s',
  )
  main()
