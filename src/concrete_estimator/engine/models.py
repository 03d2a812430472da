"""
Data models for the estimation engine.

Uses dataclasses for structured, type-safe data representation. Inputs are
frozen so a request can be shared freely once built; JSON-shaped dicts use
camelCase keys (volumeM3, mixRatio, dryFactor, ...).
"""
from dataclasses import dataclass, field
from typing import Optional

MATERIALS = ('cement', 'sand', 'aggregate')


@dataclass(frozen=True)
class MixRatio:
    """Relative parts by volume of cement, sand and aggregate (e.g. 1:2:4)."""
    cement: float
    sand: float
    aggregate: float

    @property
    def total_parts(self) -> float:
        return self.cement + self.sand + self.aggregate

    def as_text(self) -> str:
        """Ratio in the usual colon notation, e.g. '1:2:4'."""
        return ":".join(f"{part:g}" for part in (self.cement, self.sand, self.aggregate))

    def to_dict(self) -> dict:
        return {"cement": self.cement, "sand": self.sand, "aggregate": self.aggregate}

    @classmethod
    def from_dict(cls, data: dict) -> 'MixRatio':
        return cls(
            cement=float(data['cement']),
            sand=float(data['sand']),
            aggregate=float(data['aggregate']),
        )


@dataclass(frozen=True)
class Densities:
    """Bulk densities in kg/m³."""
    cement: float
    sand: float
    aggregate: float

    def to_dict(self) -> dict:
        return {"cement": self.cement, "sand": self.sand, "aggregate": self.aggregate}

    @classmethod
    def from_dict(cls, data: dict, defaults: Optional['Densities'] = None) -> 'Densities':
        """Build from a dict, filling absent fields from `defaults` when given."""
        values = {}
        for name in MATERIALS:
            value = data.get(name)
            if value is None and defaults is not None:
                value = getattr(defaults, name)
            if value is None:
                raise KeyError(name)
            values[name] = float(value)
        return cls(**values)


@dataclass(frozen=True)
class UnitCosts:
    """Flat unit costs: cement per 50 kg bag, sand and aggregate per tonne."""
    cement_per_bag: float = 10.0
    sand_per_tonne: float = 50.0
    aggregate_per_tonne: float = 35.0

    def to_dict(self) -> dict:
        return {
            "cementPerBag": self.cement_per_bag,
            "sandPerTonne": self.sand_per_tonne,
            "aggregatePerTonne": self.aggregate_per_tonne,
        }


@dataclass(frozen=True)
class EstimationInput:
    """
    A single estimation request.

    Optional fields left as None are resolved to defaults by the engine;
    the resolved copy is echoed back in EstimationResult.parameters.
    """
    volume_m3: float
    mix_ratio: MixRatio
    densities: Optional[Densities] = None
    dry_factor: Optional[float] = None
    wastage_factor: Optional[float] = None

    def to_dict(self) -> dict:
        data = {
            "volumeM3": self.volume_m3,
            "mixRatio": self.mix_ratio.to_dict(),
        }
        if self.densities is not None:
            data["densities"] = self.densities.to_dict()
        if self.dry_factor is not None:
            data["dryFactor"] = self.dry_factor
        if self.wastage_factor is not None:
            data["wastageFactor"] = self.wastage_factor
        return data

    @classmethod
    def from_dict(cls, data: dict, default_densities: Optional[Densities] = None) -> 'EstimationInput':
        """
        Build from a JSON-shaped payload.

        Assumes the payload already passed validation; missing required
        fields raise KeyError/TypeError rather than being guessed.
        """
        densities = None
        if data.get('densities') is not None:
            densities = Densities.from_dict(data['densities'], defaults=default_densities)

        dry_factor = data.get('dryFactor')
        wastage_factor = data.get('wastageFactor')

        return cls(
            volume_m3=float(data['volumeM3']),
            mix_ratio=MixRatio.from_dict(data['mixRatio']),
            densities=densities,
            dry_factor=float(dry_factor) if dry_factor is not None else None,
            wastage_factor=float(wastage_factor) if wastage_factor is not None else None,
        )


@dataclass
class TraceStep:
    """A single step in the calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class MaterialResult:
    """Quantities for one material. `bags` is only set for cement."""
    volume: float
    mass: float
    tonnes: float
    cost: float
    bags: Optional[int] = None

    def to_dict(self) -> dict:
        data = {"volume": self.volume, "mass": self.mass}
        if self.bags is not None:
            data["bags"] = self.bags
        data["tonnes"] = self.tonnes
        data["cost"] = self.cost
        return data


@dataclass(frozen=True)
class Totals:
    volume: float
    mass: float
    estimated_cost: float

    def to_dict(self) -> dict:
        return {"volume": self.volume, "mass": self.mass, "estimatedCost": self.estimated_cost}


@dataclass
class EstimationResult:
    """Complete bill of materials for one estimation."""
    cement: MaterialResult
    sand: MaterialResult
    aggregate: MaterialResult
    totals: Totals
    parameters: EstimationInput
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the calculation trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def materials(self) -> dict[str, MaterialResult]:
        """Material results keyed by canonical material name, in BoM order."""
        return {name: getattr(self, name) for name in MATERIALS}

    def to_dict(self) -> dict:
        """JSON-shaped result (the trace is not part of the wire format)."""
        return {
            "cement": self.cement.to_dict(),
            "sand": self.sand.to_dict(),
            "aggregate": self.aggregate.to_dict(),
            "totals": self.totals.to_dict(),
            "parameters": self.parameters.to_dict(),
        }
