"""
Estimation Engine - volumetric mix-ratio material take-off with traceability.

One pure calculation shared by the API (authoritative) and the Streamlit
preview, so both always produce the same numbers:
- Dry-volume bulking of the target wet volume
- Volume split by mix-ratio parts, mass from bulk density
- Uniform wastage on mass (never on volume)
- 50 kg cement bags (always rounded up) and tonnes for every material
- Flat unit-cost pricing
- Execution trace for every step
"""
import logging
import math
from dataclasses import replace
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from .errors import InvalidInput
from .models import (
    MATERIALS,
    Densities,
    EstimationInput,
    EstimationResult,
    MaterialResult,
    Totals,
    UnitCosts,
)
from .presets import (
    BAG_SIZE_KG,
    DEFAULT_DENSITIES,
    DEFAULT_DRY_FACTOR,
    DEFAULT_UNIT_COSTS,
    DEFAULT_WASTAGE_FACTOR,
)

logger = logging.getLogger(__name__)

# Output precision (decimal places)
VOLUME_DP = 6
MASS_DP = 2
COST_DP = 2
TONNES_DP = 3

# Unit each material is priced in, and accepted spellings in cost files
PRICED_UNITS = {'cement': 'bag', 'sand': 'tonne', 'aggregate': 'tonne'}
UNIT_ALIASES = {'bag': 'bag', 'bags': 'bag', 'tonne': 'tonne', 'tonnes': 'tonne', 't': 'tonne'}


def bags_for_mass(mass_kg: float, bag_size_kg: float = BAG_SIZE_KG) -> int:
    """Whole bags needed for a mass. A partial bag still counts as a bag."""
    return math.ceil(mass_kg / bag_size_kg)


def resolve_input(
    estimation_input: EstimationInput,
    default_densities: Densities = DEFAULT_DENSITIES,
    default_dry_factor: float = DEFAULT_DRY_FACTOR,
    default_wastage_factor: float = DEFAULT_WASTAGE_FACTOR,
) -> EstimationInput:
    """Return a copy of the input with every optional field filled in."""
    return replace(
        estimation_input,
        densities=estimation_input.densities or default_densities,
        dry_factor=(
            estimation_input.dry_factor
            if estimation_input.dry_factor is not None
            else default_dry_factor
        ),
        wastage_factor=(
            estimation_input.wastage_factor
            if estimation_input.wastage_factor is not None
            else default_wastage_factor
        ),
    )


def _check_input(estimation_input: EstimationInput):
    """Reject inputs the calculation cannot be run on."""
    values = (
        estimation_input.volume_m3,
        estimation_input.dry_factor,
        estimation_input.wastage_factor,
        *estimation_input.mix_ratio.to_dict().values(),
        *estimation_input.densities.to_dict().values(),
    )
    if not all(math.isfinite(v) for v in values):
        raise InvalidInput("Input values must be finite numbers")

    if not estimation_input.volume_m3 > 0:
        raise InvalidInput('Volume must be greater than 0')

    ratio = estimation_input.mix_ratio
    if not (ratio.cement > 0 and ratio.sand > 0 and ratio.aggregate > 0):
        raise InvalidInput('All mix ratio parts must be greater than 0')

    densities = estimation_input.densities
    if not (densities.cement > 0 and densities.sand > 0 and densities.aggregate > 0):
        raise InvalidInput('All densities must be greater than 0')


def estimate_materials(
    estimation_input: EstimationInput,
    unit_costs: Optional[UnitCosts] = None,
    bag_size_kg: float = BAG_SIZE_KG,
) -> EstimationResult:
    """
    Estimate cement, sand and aggregate for a poured volume.

    Args:
        estimation_input: Volume, mix ratio and optional densities/factors.
            Fields left as None take the standard defaults.
        unit_costs: Flat costs per bag/tonne. Defaults to DEFAULT_UNIT_COSTS.
        bag_size_kg: Nominal cement bag size.

    Returns:
        EstimationResult with rounded quantities, totals, the resolved
        parameters and a calculation trace.

    Raises:
        InvalidInput: volume, a mix part or a density is not positive, or
            an input or intermediate quantity is not finite.
    """
    params = resolve_input(estimation_input)
    _check_input(params)
    costs = unit_costs or DEFAULT_UNIT_COSTS
    ratio = params.mix_ratio
    densities = params.densities

    # 1. Total parts
    total_parts = ratio.total_parts

    # 2. Bulking of the dry constituents
    adjusted_volume = params.volume_m3 * params.dry_factor

    # 3-5. Volume share, mass, wastage (full precision until assembly)
    wastage_multiplier = 1 + (params.wastage_factor / 100)
    volumes = {}
    masses = {}
    for name in MATERIALS:
        volumes[name] = (getattr(ratio, name) / total_parts) * adjusted_volume
        masses[name] = volumes[name] * getattr(densities, name) * wastage_multiplier

    if not (math.isfinite(adjusted_volume) and all(math.isfinite(m) for m in masses.values())):
        raise InvalidInput("Volume, densities or factors are too large to estimate")

    # 6. Practical units
    cement_bags = bags_for_mass(masses['cement'], bag_size_kg)
    tonnes = {name: masses[name] / 1000 for name in MATERIALS}

    # 7. Costs
    material_costs = {
        'cement': cement_bags * costs.cement_per_bag,
        'sand': tonnes['sand'] * costs.sand_per_tonne,
        'aggregate': tonnes['aggregate'] * costs.aggregate_per_tonne,
    }
    total_cost = sum(material_costs.values())
    total_mass = sum(masses.values())
    if not (math.isfinite(total_cost) and math.isfinite(total_mass)):
        raise InvalidInput("Volume, densities or factors are too large to estimate")

    # 8. Round once, at assembly
    material_results = {
        name: MaterialResult(
            volume=round(volumes[name], VOLUME_DP),
            mass=round(masses[name], MASS_DP),
            tonnes=round(tonnes[name], TONNES_DP),
            cost=round(material_costs[name], COST_DP),
            bags=cement_bags if name == 'cement' else None,
        )
        for name in MATERIALS
    }

    result = EstimationResult(
        cement=material_results['cement'],
        sand=material_results['sand'],
        aggregate=material_results['aggregate'],
        totals=Totals(
            volume=round(adjusted_volume, VOLUME_DP),
            mass=round(total_mass, MASS_DP),
            estimated_cost=round(total_cost, COST_DP),
        ),
        parameters=params,
    )

    result.add_trace("Mix Ratio", f"{ratio.as_text()} by volume", f"{total_parts:g} parts")
    result.add_trace(
        "Dry Volume",
        f"{params.volume_m3:g} m³ × dry factor {params.dry_factor:g}",
        f"{adjusted_volume:.6f} m³",
    )
    for name in MATERIALS:
        result.add_trace(
            "Material Volume",
            f"{name} {getattr(ratio, name):g}/{total_parts:g} of dry volume",
            f"{volumes[name]:.6f} m³",
        )
    result.add_trace("Wastage", f"{params.wastage_factor:g}% on all masses", f"× {wastage_multiplier:g}")
    for name in MATERIALS:
        result.add_trace(
            "Material Mass",
            f"{name} at {getattr(densities, name):g} kg/m³ incl. wastage",
            f"{masses[name]:.2f} kg",
        )
    result.add_trace("Cement Bags", f"{masses['cement']:.2f} kg ÷ {bag_size_kg:g} kg, rounded up", str(cement_bags))
    result.add_trace("Cost", "Bags and tonnes at flat unit costs", f"${total_cost:.2f}")

    logger.debug(
        "Estimated %.4f m³ at %s: %.2f kg total, %d bags, cost %.2f",
        params.volume_m3, ratio.as_text(), total_mass, cement_bags, total_cost,
    )
    return result


def load_unit_costs(path) -> UnitCosts:
    """
    Load flat unit costs from a CSV with `material` and `unit_cost` columns.

    An optional `unit` column must match the priced unit (bag for cement,
    tonne for sand and aggregate). Missing materials keep their default
    cost; unknown materials are skipped.
    """
    df = pd.read_csv(path, dtype=str).fillna('')
    df.columns = [c.strip() for c in df.columns]
    for col in ('material', 'unit_cost'):
        if col not in df.columns:
            raise ValueError(f"Unit cost file {path} is missing the '{col}' column")

    field_by_material = {
        'cement': 'cement_per_bag',
        'sand': 'sand_per_tonne',
        'aggregate': 'aggregate_per_tonne',
    }
    overrides = {}
    for _, row in df.iterrows():
        material = row['material'].strip().lower()
        if material not in field_by_material:
            logger.warning("Skipping unknown material '%s' in %s", row['material'], path)
            continue
        try:
            cost = float(row['unit_cost'])
        except ValueError:
            raise ValueError(f"Unit cost for {material} is not a number: '{row['unit_cost']}'")
        if not (math.isfinite(cost) and cost > 0):
            raise ValueError(f"Unit cost for {material} must be a positive number, got {cost}")
        if 'unit' in df.columns and row['unit'].strip():
            unit = row['unit'].strip().lower()
            if UNIT_ALIASES.get(unit) != PRICED_UNITS[material]:
                raise ValueError(
                    f"Unit for {material} must be '{PRICED_UNITS[material]}', got '{row['unit']}'"
                )
        overrides[field_by_material[material]] = cost

    return replace(DEFAULT_UNIT_COSTS, **overrides)


class EstimationEngine:
    """
    Estimation engine bound to configuration.

    Holds only immutable configuration (unit costs and defaults), so a single
    instance can serve any number of concurrent callers.
    """

    def __init__(self, settings: Optional[Settings] = None, unit_costs: Optional[UnitCosts] = None):
        """Initialize engine with settings and the unit-cost table."""
        self.settings = settings or get_settings()

        if unit_costs is not None:
            self.unit_costs = unit_costs
        else:
            self.unit_costs = DEFAULT_UNIT_COSTS
            costs_path = self.settings.unit_costs_csv
            if costs_path and costs_path.exists():
                self.unit_costs = load_unit_costs(costs_path)
                logger.info("Loaded unit costs from %s", costs_path)

    def reload_data(self):
        """Reload the unit-cost table from disk."""
        self.__init__(self.settings)

    def resolve(self, estimation_input: EstimationInput) -> EstimationInput:
        """Fill optional fields from the configured defaults."""
        return resolve_input(
            estimation_input,
            default_densities=DEFAULT_DENSITIES,
            default_dry_factor=self.settings.default_dry_factor,
            default_wastage_factor=self.settings.default_wastage_factor,
        )

    def estimate(self, estimation_input: EstimationInput) -> EstimationResult:
        """Calculate a full bill of materials with trace."""
        return estimate_materials(
            self.resolve(estimation_input),
            unit_costs=self.unit_costs,
            bag_size_kg=self.settings.bag_size_kg,
        )

    def estimate_from_dict(self, payload: dict) -> EstimationResult:
        """Build an EstimationInput from a validated JSON payload and estimate it."""
        return self.estimate(EstimationInput.from_dict(payload, default_densities=DEFAULT_DENSITIES))
