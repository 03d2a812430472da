"""
Export Service - bill of materials formatting and CSV/JSON export.

Exports only reformat a result; every number is passed through as computed
by the engine. Accepts either an EstimationResult or its JSON-shaped dict
(as posted back by a client).
"""
import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

import pandas as pd

from ..engine.models import MATERIALS, EstimationResult

SUPPORTED_FORMATS = ('csv', 'json')

MATERIAL_NAMES = {
    'cement': 'Portland Cement',
    'sand': 'Fine Sand',
    'aggregate': 'Coarse Aggregate',
}

BOM_COLUMNS = ['Material', 'Volume (m³)', 'Mass (kg)', 'Bags (50kg)', 'Tonnes', 'Cost']


@dataclass
class ExportOptions:
    """Display metadata attached to an export."""
    project_name: str
    location: Optional[str] = None
    estimator_name: str = "Concrete Estimator"
    date: datetime = field(default_factory=datetime.now)


def _as_dict(results: Union[EstimationResult, dict]) -> dict:
    if isinstance(results, EstimationResult):
        return results.to_dict()
    return results


def _mix_text(parameters: dict) -> str:
    ratio = parameters.get('mixRatio', {})
    return ":".join(f"{ratio.get(name, 0):g}" for name in MATERIALS)


def format_estimation_results(results: Union[EstimationResult, dict]) -> dict:
    """Human-readable strings for display (units and currency attached)."""
    data = _as_dict(results)
    parameters = data.get('parameters', {})

    materials = {}
    for name in MATERIALS:
        material = data[name]
        if material.get('bags') is not None:
            units = f"{material['bags']} bags (50kg)"
        else:
            units = f"{material['tonnes']} tonnes"
        materials[name] = {
            "name": MATERIAL_NAMES[name],
            "volume": f"{material['volume']} m³",
            "mass": f"{material['mass']:,.2f} kg",
            "units": units,
            "tonnes": f"{material['tonnes']} tonnes",
            "cost": f"${material.get('cost', 0.0):.2f}",
        }

    totals = data['totals']
    dry_factor = parameters.get('dryFactor')
    wastage = parameters.get('wastageFactor')
    return {
        "materials": materials,
        "totals": {
            "volume": f"{totals['volume']} m³",
            "mass": f"{totals['mass']:,.2f} kg",
            "cost": f"${totals['estimatedCost']:.2f}",
        },
        "parameters": {
            "mixRatio": _mix_text(parameters),
            "dryFactor": f"{dry_factor:.2f}" if dry_factor is not None else "1.54",
            "wastageFactor": f"{wastage:g}%" if wastage is not None else "5%",
        },
    }


def to_dataframe(results: Union[EstimationResult, dict]) -> pd.DataFrame:
    """Bill of materials as a DataFrame, one row per material."""
    data = _as_dict(results)
    rows = []
    for name in MATERIALS:
        material = data[name]
        rows.append({
            'Material': MATERIAL_NAMES[name],
            'Volume (m³)': material['volume'],
            'Mass (kg)': material['mass'],
            'Bags (50kg)': material.get('bags'),
            'Tonnes': material['tonnes'],
            'Cost': material.get('cost'),
        })
    df = pd.DataFrame(rows, columns=BOM_COLUMNS)
    df['Bags (50kg)'] = df['Bags (50kg)'].astype('Int64')
    return df


def generate_csv_export(results: Union[EstimationResult, dict], options: ExportOptions) -> str:
    """CSV text: a metadata block, a blank line, then the BoM with a totals row."""
    data = _as_dict(results)
    parameters = data.get('parameters', {})
    totals = data['totals']

    metadata = pd.DataFrame([
        ('Project', options.project_name),
        ('Location', options.location or ''),
        ('Estimator', options.estimator_name),
        ('Date', options.date.strftime('%Y-%m-%d')),
        ('Volume (m³)', parameters.get('volumeM3', '')),
        ('Mix Ratio', _mix_text(parameters)),
        ('Dry Factor', parameters.get('dryFactor', '')),
        ('Wastage (%)', parameters.get('wastageFactor', '')),
    ])

    bom = to_dataframe(data)
    total_row = pd.DataFrame([{
        'Material': 'TOTAL',
        'Volume (m³)': totals['volume'],
        'Mass (kg)': totals['mass'],
        'Bags (50kg)': pd.NA,
        'Tonnes': None,
        'Cost': totals['estimatedCost'],
    }], columns=BOM_COLUMNS)
    total_row['Bags (50kg)'] = total_row['Bags (50kg)'].astype('Int64')
    bom = pd.concat([bom, total_row], ignore_index=True)

    buffer = io.StringIO()
    metadata.to_csv(buffer, index=False, header=False)
    buffer.write('\n')
    bom.to_csv(buffer, index=False)
    return buffer.getvalue()


def generate_json_export(results: Union[EstimationResult, dict], options: ExportOptions) -> dict:
    """JSON-ready dict with metadata, the untouched results and display strings."""
    data = _as_dict(results)
    return {
        "metadata": {
            "projectName": options.project_name,
            "location": options.location,
            "estimatorName": options.estimator_name,
            "generatedAt": options.date.isoformat(timespec='seconds'),
        },
        "results": data,
        "formatted": format_estimation_results(data),
    }


def get_export_filename(project_name: str, fmt: str, date: Optional[datetime] = None) -> str:
    """Filesystem-safe export filename, e.g. 'site_a_estimate_2026-10-18.csv'."""
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}'")
    slug = re.sub(r'[^a-z0-9]+', '_', project_name.strip().lower()).strip('_') or 'project'
    stamp = (date or datetime.now()).strftime('%Y-%m-%d')
    return f"{slug}_estimate_{stamp}.{fmt}"
