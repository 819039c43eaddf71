"""
Error taxonomy for the planning engine.

An infeasible social-club percent is not an error: the calculator returns
``None`` for it and ``calculate_all_scenarios`` leaves it out.
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for all planning engine errors."""


class InputValidationError(PlannerError, ValueError):
    """Input rejected before any computation (dimensions, costs, percents)."""


class CurrencyMismatchError(PlannerError, ValueError):
    """A cost breakdown mixes currencies."""


class DivisionByZeroError(PlannerError, ZeroDivisionError):
    """A ratio would divide by a zero lot count or a zero total cost."""
