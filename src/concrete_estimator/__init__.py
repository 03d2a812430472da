"""
Concrete Estimator Package

Material take-off for poured concrete using the volumetric mix-ratio method.
Resolves cement, sand and aggregate quantities with bag/tonne units and cost.
"""

__version__ = "1.0.0"
