import csv
import io
from datetime import datetime

import pytest

from concrete_estimator.engine import EstimationInput, MixRatio, estimate_materials
from concrete_estimator.services.export_service import (
    ExportOptions,
    format_estimation_results,
    generate_csv_export,
    generate_json_export,
    get_export_filename,
    to_dataframe,
)


@pytest.fixture(scope="module")
def result():
    return estimate_materials(EstimationInput(volume_m3=100.0, mix_ratio=MixRatio(1, 2, 4)))


@pytest.fixture
def options():
    return ExportOptions(project_name="Site A Slab", location="Leeds", date=datetime(2026, 10, 18, 9, 30))


def test_format_results(result):
    formatted = format_estimation_results(result)

    assert formatted["materials"]["cement"]["name"] == "Portland Cement"
    assert formatted["materials"]["cement"]["units"] == "666 bags (50kg)"
    assert formatted["materials"]["cement"]["cost"] == "$6660.00"
    assert formatted["materials"]["sand"]["units"] == "73.92 tonnes"
    assert formatted["materials"]["aggregate"]["mass"] == "161,700.00 kg"
    assert formatted["totals"]["cost"] == "$16015.50"
    assert formatted["parameters"] == {"mixRatio": "1:2:4", "dryFactor": "1.54", "wastageFactor": "5%"}


def test_format_accepts_posted_dict(result):
    assert format_estimation_results(result.to_dict()) == format_estimation_results(result)


def test_dataframe_keeps_engine_values(result):
    df = to_dataframe(result)

    assert list(df['Material']) == ['Portland Cement', 'Fine Sand', 'Coarse Aggregate']
    assert list(df['Mass (kg)']) == [result.cement.mass, result.sand.mass, result.aggregate.mass]
    assert df['Bags (50kg)'].iloc[0] == 666
    assert df['Bags (50kg)'].isna().sum() == 2


def test_csv_export(result, options):
    content = generate_csv_export(result, options)
    metadata_block, bom_block = content.split('\n\n', 1)

    metadata = dict(csv.reader(io.StringIO(metadata_block)))
    assert metadata['Project'] == 'Site A Slab'
    assert metadata['Location'] == 'Leeds'
    assert metadata['Date'] == '2026-10-18'
    assert metadata['Mix Ratio'] == '1:2:4'

    rows = list(csv.DictReader(io.StringIO(bom_block)))
    assert [r['Material'] for r in rows] == ['Portland Cement', 'Fine Sand', 'Coarse Aggregate', 'TOTAL']
    assert rows[0]['Bags (50kg)'] == '666'
    assert rows[1]['Bags (50kg)'] == ''
    assert float(rows[2]['Mass (kg)']) == result.aggregate.mass
    assert float(rows[3]['Cost']) == result.totals.estimated_cost


def test_json_export(result, options):
    exported = generate_json_export(result, options)

    assert exported["metadata"]["projectName"] == "Site A Slab"
    assert exported["metadata"]["generatedAt"] == "2026-10-18T09:30:00"
    assert exported["results"] == result.to_dict()
    assert exported["formatted"]["totals"]["cost"] == "$16015.50"


@pytest.mark.parametrize("name,fmt,expected", [
    ("Site A Slab", "csv", "site_a_slab_estimate_2026-10-18.csv"),
    ("  Plot #7 / Footings ", "json", "plot_7_footings_estimate_2026-10-18.json"),
    ("***", "csv", "project_estimate_2026-10-18.csv"),
])
def test_export_filename(name, fmt, expected):
    assert get_export_filename(name, fmt, datetime(2026, 10, 18)) == expected


def test_export_filename_rejects_unknown_format():
    with pytest.raises(ValueError):
        get_export_filename("Site", "pdf")
