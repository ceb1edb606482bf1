"""Raw statement normalization into canonical per-year records."""

from dcfpro.normalize.statements import normalize_statements
from dcfpro.normalize.statements import pick_first_defined

__all__ = ['normalize_statements', 'pick_first_defined']
