"""Utility exports."""

from .logging import get_logger, log_phase
from .params import parse_flag, parse_int

__all__ = ["get_logger", "log_phase", "parse_flag", "parse_int"]
