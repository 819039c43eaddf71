from __future__ import annotations

from microvilla.planning_engine.subdivision import SubdivisionCalculator
from microvilla.planning_engine.financial import FinancialAnalyzer

__all__ = ["SubdivisionCalculator", "FinancialAnalyzer"]
