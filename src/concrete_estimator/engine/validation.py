"""
Input validation for estimation requests.

Works on the raw JSON-shaped payload (camelCase keys), collects every
problem and never raises. The engine repeats the checks it cannot live
without, since it can be called without going through here.
"""
import math
from typing import Any, Optional

from .errors import ValidationError

MIN_SENSIBLE_VOLUME_M3 = 0.01
MAX_DRY_FACTOR = 3.0
MAX_WASTAGE_PERCENT = 50.0

_LABELS = {'cement': 'Cement', 'sand': 'Sand', 'aggregate': 'Aggregate'}


def _as_number(value: Any) -> Optional[float]:
    """None when absent, NaN when present but not a finite number, float otherwise."""
    if value is None:
        return None
    if isinstance(value, bool):
        return math.nan
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan
    return number if math.isfinite(number) else math.nan


def validate_estimation_input(payload: Optional[dict]) -> list[str]:
    """
    Validate a (possibly partial) estimation payload.

    Returns a list of human-readable error messages; empty means valid.
    """
    errors: list[str] = []
    payload = payload if isinstance(payload, dict) else {}

    # NaN fails every comparison, so non-numeric values land in the error branches
    volume = _as_number(payload.get('volumeM3'))
    if volume is None or not volume > 0:
        errors.append('Volume must be a positive number')
    elif volume < MIN_SENSIBLE_VOLUME_M3:
        errors.append('Volume is very small (< 0.01 m³). Please verify the input')

    mix_ratio = payload.get('mixRatio')
    if not mix_ratio:
        errors.append('Mix ratio is required')
    elif not isinstance(mix_ratio, dict):
        errors.append('Mix ratio must be an object with cement, sand and aggregate parts')
    else:
        for name, label in _LABELS.items():
            part = _as_number(mix_ratio.get(name))
            if part is None or not part > 0:
                errors.append(f'{label} ratio must be positive')

    densities = payload.get('densities')
    if isinstance(densities, dict):
        for name, label in _LABELS.items():
            density = _as_number(densities.get(name))
            if density is not None and not density > 0:
                errors.append(f'{label} density must be positive')
    elif densities is not None:
        errors.append('Densities must be an object with cement, sand and aggregate values')

    dry_factor = _as_number(payload.get('dryFactor'))
    if dry_factor is not None and not 0 < dry_factor <= MAX_DRY_FACTOR:
        errors.append('Dry factor must be between 0 and 3')

    wastage = _as_number(payload.get('wastageFactor'))
    if wastage is not None and not 0 <= wastage <= MAX_WASTAGE_PERCENT:
        errors.append('Wastage factor must be between 0% and 50%')

    return errors


def raise_for_errors(payload: Optional[dict]) -> None:
    """Raise ValidationError carrying all messages if the payload is invalid."""
    errors = validate_estimation_input(payload)
    if errors:
        raise ValidationError(errors)
