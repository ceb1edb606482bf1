'''Projection and DCF calculation engine with pure math functions.'''

from dcfpro.engine.dcf import calculate_dcf_fcff
from dcfpro.engine.dcf import compute_terminal_value
from dcfpro.engine.financials import calc_net_debt
from dcfpro.engine.financials import next_ppe
from dcfpro.engine.projector import compute_forecast
from dcfpro.engine.projector import compute_historical
from dcfpro.engine.projector import compute_scenario

__all__ = [
    'calc_net_debt',
    'calculate_dcf_fcff',
    'compute_forecast',
    'compute_historical',
    'compute_scenario',
    'compute_terminal_value',
    'next_ppe',
]
