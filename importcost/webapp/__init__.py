"""
Web API for the import cost calculator.

The FastAPI application lives in importcost.webapp.main.
"""
