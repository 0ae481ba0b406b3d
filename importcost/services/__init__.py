"""
Services layer for the import cost calculator.

Contains the session logic shared by the CLI and the web routes.
"""

from importcost.services.calculator_service import CalculatorSession, RecalculationOutcome

__all__ = ["CalculatorSession", "RecalculationOutcome"]
