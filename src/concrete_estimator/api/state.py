"""
Shared engine instance for the API routes.
"""
from ..engine import EstimationEngine

engine = EstimationEngine()
