"""
validate-poweron - PowerOn change-set validation.

Find the PowerOn specfiles a change touches, validate them on Symitar.
"""

from poweron_validate.models.validation import ValidationResult
from poweron_validate.validator import validate_powerons

__version__ = "0.3.0"
__all__ = ["ValidationResult", "__version__", "validate_powerons"]
