"""Domain types for the forecasting and valuation pipeline."""

from dcfpro.domain.numbers import safe_num
from dcfpro.domain.types import DCFCashflow
from dcfpro.domain.types import DCFResult
from dcfpro.domain.types import PolicyOutput
from dcfpro.domain.types import RawStatementYear
from dcfpro.domain.types import Scenario
from dcfpro.domain.types import ScenarioYear
from dcfpro.domain.types import ValuationResult

__all__ = [
    'DCFCashflow',
    'DCFResult',
    'PolicyOutput',
    'RawStatementYear',
    'Scenario',
    'ScenarioYear',
    'ValuationResult',
    'safe_num',
]
