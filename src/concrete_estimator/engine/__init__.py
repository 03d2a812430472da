"""Engine subpackage - core estimation logic, validation and presets."""
from .estimation_engine import EstimationEngine, estimate_materials, bags_for_mass
from .models import EstimationInput, EstimationResult, MaterialResult, MixRatio, Densities, UnitCosts
from .errors import EstimationError, ValidationError, InvalidInput
from .validation import validate_estimation_input
from .presets import get_preset_mix_ratios, get_preset

__all__ = [
    'EstimationEngine', 'estimate_materials', 'bags_for_mass',
    'EstimationInput', 'EstimationResult', 'MaterialResult', 'MixRatio', 'Densities', 'UnitCosts',
    'EstimationError', 'ValidationError', 'InvalidInput',
    'validate_estimation_input', 'get_preset_mix_ratios', 'get_preset',
]
