"""
Analysis tools built on top of the valuation pipeline.

Modules:
  sensitivity: WACC x perpetual growth sensitivity tables
  export: Scenario and cash flow DataFrames, CSV export
"""
