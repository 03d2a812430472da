import pytest

from concrete_estimator.engine import MixRatio, get_preset, get_preset_mix_ratios


def test_standard_classes():
    presets = get_preset_mix_ratios()
    assert presets["C20/25"] == MixRatio(cement=1, sand=2, aggregate=4)
    assert presets["C25/30"] == MixRatio(cement=1, sand=1.5, aggregate=3)
    assert presets["C30/37"] == MixRatio(cement=1, sand=1.2, aggregate=2.4)
    assert presets["C35/45"] == MixRatio(cement=1, sand=1, aggregate=2)
    assert list(presets) == ["C20/25", "C25/30", "C30/37", "C35/45"]


def test_registry_cannot_be_mutated():
    presets = get_preset_mix_ratios()
    with pytest.raises(TypeError):
        presets["C20/25"] = MixRatio(1, 3, 6)
    with pytest.raises(TypeError):
        del presets["C35/45"]
    with pytest.raises(AttributeError):
        presets["C20/25"].sand = 3

    assert get_preset_mix_ratios()["C20/25"] == MixRatio(1, 2, 4)
    assert len(get_preset_mix_ratios()) == 4


def test_get_preset_normalizes_label():
    assert get_preset(" c25/30 ") == MixRatio(1, 1.5, 3)


def test_get_preset_unknown_label():
    with pytest.raises(KeyError):
        get_preset("C50/60")


def test_mix_ratio_text():
    assert get_preset("C30/37").as_text() == "1:1.2:2.4"
