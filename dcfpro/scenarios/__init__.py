"""Assumption sets and their defaults."""

from dcfpro.scenarios.config import DEFAULT_MODEL_PARAMS
from dcfpro.scenarios.config import DCFAssumptions
from dcfpro.scenarios.config import ModelAssumptions

__all__ = ['DEFAULT_MODEL_PARAMS', 'DCFAssumptions', 'ModelAssumptions']
