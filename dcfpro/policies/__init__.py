"""
Assumption policies.

A policy derives a forecast assumption set and returns it together with
diagnostic information.

To add a new policy:
1. Create a class inheriting from AssumptionPolicy
2. Implement compute(scenario, hist_years) returning
   PolicyOutput[ModelAssumptions]
"""

from dcfpro.policies.historical import AssumptionPolicy
from dcfpro.policies.historical import HistoricalAverager
from dcfpro.policies.historical import compute_historical_averages

__all__ = [
    'AssumptionPolicy',
    'HistoricalAverager',
    'compute_historical_averages',
]
