"""Internal utilities: input validation and logging setup."""

from .logger import setup_logger
from .validation import validate_problem

__all__ = ["setup_logger", "validate_problem"]
