import pytest

from densitymesh import ConfigurationError, DensitySource, GenerationSettings
from densitymesh.settings import PointsSeparation


def test_defaults():
    settings = GenerationSettings()
    assert settings.points_separation == PointsSeparation.constant(10)
    assert settings.visibility_threshold == 0.01
    assert settings.steepness_threshold == 0.01
    assert settings.max_iterations == 32
    assert settings.extrude_size is None
    assert not settings.extrusion_enabled
    assert not settings.keep_invisible_triangles
    assert settings.density_source is DensitySource.LUMA_ALPHA
    assert settings.update_region_margin == 0.0


def test_separation_parse_and_lerp():
    sep = PointsSeparation.parse("2..8")
    assert (sep.minimum, sep.maximum) == (2.0, 8.0)
    assert sep.at(0.0) == 8.0
    assert sep.at(1.0) == 2.0
    assert sep.at(0.5) == 5.0
    # Steepness is clamped to [0, 1]
    assert sep.at(3.0) == 2.0
    assert sep.at(-1.0) == 8.0
    assert str(sep) == "2.0..8.0"


def test_separation_constant_ignores_steepness():
    sep = PointsSeparation.parse(" 10 ")
    assert sep.is_constant
    assert sep.at(0.0) == sep.at(1.0) == 10.0
    assert str(sep) == "10.0"


def test_separation_coerce():
    assert GenerationSettings(points_separation=4).points_separation.at(1) == 4
    assert GenerationSettings(points_separation=(1, 3)).points_separation.maximum == 3
    with pytest.raises(ConfigurationError):
        PointsSeparation.coerce([1, 2, 3])
    with pytest.raises(ConfigurationError):
        PointsSeparation.parse("a..b")


@pytest.mark.parametrize(
    "changes",
    [
        {"points_separation": 0},
        {"points_separation": "8..2"},
        {"visibility_threshold": -0.1},
        {"steepness_threshold": -1},
        {"max_iterations": 0},
        {"extrude_size": -1.0},
        {"scale": 0},
        {"max_iterations": 2.5},
        {"max_iterations": True},
        {"scale": 1.5},
        {"visibility_threshold": None},
        {"steepness_threshold": "0.1"},
        {"extrude_size": "wide"},
        {"update_region_margin": None},
        {"density_source": "purple"},
        {"points_separation": None},
        {"points_separation": ("a", 2)},
        {"points_separation": True},
    ],
)
def test_invalid_values_rejected(changes):
    with pytest.raises(ConfigurationError):
        GenerationSettings(**changes)


def test_with_changes_validates():
    settings = GenerationSettings().with_changes(extrude_size=2.0)
    assert settings.extrusion_enabled
    with pytest.raises(ConfigurationError):
        settings.with_changes(max_iterations=-3)


def test_dict_round_trip():
    settings = GenerationSettings(
        points_separation="1..5", density_source="red", keep_invisible_triangles=True
    )
    data = settings.to_dict()
    assert data["points_separation"] == "1.0..5.0"
    assert data["density_source"] == "red"
    assert GenerationSettings.from_dict(data) == settings


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigurationError, match="bogus"):
        GenerationSettings.from_dict({"bogus": 1})
