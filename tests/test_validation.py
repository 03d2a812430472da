import pytest

from concrete_estimator.engine import ValidationError, validate_estimation_input
from concrete_estimator.engine.validation import raise_for_errors


def valid_payload(**overrides):
    payload = {
        "volumeM3": 10,
        "mixRatio": {"cement": 1, "sand": 2, "aggregate": 4},
    }
    payload.update(overrides)
    return payload


def test_valid_payload_has_no_errors():
    assert validate_estimation_input(valid_payload()) == []


def test_full_valid_payload_has_no_errors():
    payload = valid_payload(
        densities={"cement": 1440, "sand": 1600, "aggregate": 1750},
        dryFactor=3.0,
        wastageFactor=0,
    )
    assert validate_estimation_input(payload) == []


@pytest.mark.parametrize("volume", [None, 0, -5, "abc"])
def test_volume_must_be_positive(volume):
    payload = valid_payload(volumeM3=volume)
    errors = validate_estimation_input(payload)
    assert 'Volume must be a positive number' in errors


def test_missing_volume():
    payload = valid_payload()
    del payload["volumeM3"]
    assert validate_estimation_input(payload) == ['Volume must be a positive number']


def test_tiny_volume_is_flagged():
    errors = validate_estimation_input(valid_payload(volumeM3=0.005))
    assert errors == ['Volume is very small (< 0.01 m³). Please verify the input']


def test_volume_at_threshold_is_accepted():
    assert validate_estimation_input(valid_payload(volumeM3=0.01)) == []


def test_missing_mix_ratio():
    payload = valid_payload()
    del payload["mixRatio"]
    assert validate_estimation_input(payload) == ['Mix ratio is required']


def test_mix_ratio_errors_are_all_collected():
    errors = validate_estimation_input(valid_payload(mixRatio={"cement": 0, "sand": -1}))
    assert errors == [
        'Cement ratio must be positive',
        'Sand ratio must be positive',
        'Aggregate ratio must be positive',
    ]


def test_legacy_agg_key_is_not_accepted():
    errors = validate_estimation_input(valid_payload(mixRatio={"cement": 1, "sand": 2, "agg": 4}))
    assert errors == ['Aggregate ratio must be positive']


def test_partial_densities_are_allowed():
    assert validate_estimation_input(valid_payload(densities={"cement": 1500})) == []


def test_non_positive_densities():
    errors = validate_estimation_input(valid_payload(densities={"cement": 0, "sand": 1600, "aggregate": -3}))
    assert errors == ['Cement density must be positive', 'Aggregate density must be positive']


@pytest.mark.parametrize("dry_factor", [0, -1, 3.01, 10])
def test_dry_factor_range(dry_factor):
    errors = validate_estimation_input(valid_payload(dryFactor=dry_factor))
    assert errors == ['Dry factor must be between 0 and 3']


@pytest.mark.parametrize("wastage", [-0.1, 50.5, 100])
def test_wastage_range(wastage):
    errors = validate_estimation_input(valid_payload(wastageFactor=wastage))
    assert errors == ['Wastage factor must be between 0% and 50%']


@pytest.mark.parametrize("wastage", [0, 5, 50])
def test_wastage_bounds_are_inclusive(wastage):
    assert validate_estimation_input(valid_payload(wastageFactor=wastage)) == []


@pytest.mark.parametrize("volume", [float('inf'), float('-inf'), float('nan'), "inf", "1e400"])
def test_non_finite_volume_is_rejected(volume):
    errors = validate_estimation_input(valid_payload(volumeM3=volume))
    assert errors == ['Volume must be a positive number']


def test_non_finite_densities_and_factors_are_rejected():
    errors = validate_estimation_input(valid_payload(
        densities={"cement": float('inf'), "sand": 1600, "aggregate": 1750},
        dryFactor=float('nan'),
        wastageFactor="-inf",
    ))
    assert errors == [
        'Cement density must be positive',
        'Dry factor must be between 0 and 3',
        'Wastage factor must be between 0% and 50%',
    ]


def test_everything_wrong_reports_everything():
    errors = validate_estimation_input({
        "volumeM3": -1,
        "mixRatio": {"cement": 0, "sand": 0, "aggregate": 0},
        "densities": {"cement": -1, "sand": -1, "aggregate": -1},
        "dryFactor": 5,
        "wastageFactor": 80,
    })
    assert len(errors) == 9


def test_never_raises_on_garbage():
    assert validate_estimation_input(None) == ['Volume must be a positive number', 'Mix ratio is required']
    errors = validate_estimation_input({"volumeM3": True, "mixRatio": "1:2:4", "densities": 5})
    assert 'Volume must be a positive number' in errors
    assert len(errors) == 3


def test_raise_for_errors():
    raise_for_errors(valid_payload())

    with pytest.raises(ValidationError) as exc_info:
        raise_for_errors(valid_payload(volumeM3=0, dryFactor=4))
    assert exc_info.value.errors == ['Volume must be a positive number', 'Dry factor must be between 0 and 3']
