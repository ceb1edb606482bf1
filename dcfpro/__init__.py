'''
Financial statement forecasting and FCFF DCF valuation.

Raw statements flow through four pure components:
  normalize.statements  -> canonical per-year records
  engine.projector      -> historical metrics and forecast years
  policies.historical   -> default assumptions from historical ratios
  engine.dcf            -> discounted cash flows and equity value

Usage:
  from dcfpro.run import run_valuation
  from dcfpro.scenarios.config import DCFAssumptions, ModelAssumptions

  result = run_valuation(statements, model=ModelAssumptions(forecast_years=5),
                         dcf=DCFAssumptions(wacc=0.09, perpetual_growth=0.02))
'''
