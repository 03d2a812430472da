"""
Preset Registry - default material tables and standard concrete classes.

All tables here are constant data. Mappings are exposed through
MappingProxyType over frozen dataclasses, so callers cannot change them.
"""
from types import MappingProxyType
from typing import Mapping

from .models import MixRatio, Densities, UnitCosts

# Bulk densities (kg/m³)
DEFAULT_DENSITIES = Densities(cement=1440.0, sand=1600.0, aggregate=1750.0)

# Flat costs: cement per 50 kg bag, sand/aggregate per tonne
DEFAULT_UNIT_COSTS = UnitCosts(cement_per_bag=10.0, sand_per_tonne=50.0, aggregate_per_tonne=35.0)

# Dry-to-wet bulking ratio for concrete
DEFAULT_DRY_FACTOR = 1.54

# Percent
DEFAULT_WASTAGE_FACTOR = 5.0

BAG_SIZE_KG = 50.0

DEFAULT_CONCRETE_CLASS = "C20/25"

_PRESET_MIX_RATIOS = MappingProxyType({
    "C20/25": MixRatio(cement=1, sand=2, aggregate=4),
    "C25/30": MixRatio(cement=1, sand=1.5, aggregate=3),
    "C30/37": MixRatio(cement=1, sand=1.2, aggregate=2.4),
    "C35/45": MixRatio(cement=1, sand=1, aggregate=2),
})


def get_preset_mix_ratios() -> Mapping[str, MixRatio]:
    """Concrete class label → mix ratio (read-only)."""
    return _PRESET_MIX_RATIOS


def get_preset(concrete_class: str) -> MixRatio:
    """
    Look up the mix ratio for a concrete class label such as "C25/30".

    Raises KeyError for unknown labels.
    """
    label = str(concrete_class).strip().upper()
    if label not in _PRESET_MIX_RATIOS:
        raise KeyError(f"Unknown concrete class '{concrete_class}'")
    return _PRESET_MIX_RATIOS[label]
