import pytest

from luxgrid.models.settings import (
    AnalysisSettings,
    LuminaireEnclosure,
    MaintenanceCategory,
    SettingsError,
    lookup_maintenance_factor,
    settings_from_dict,
)


def test_defaults():
    s = AnalysisSettings()
    assert s.grid_spacing == 1.0
    assert s.work_plane_heights == (0.0,)
    assert s.get_maintenance_factor() == pytest.approx(0.90)
    assert s.include_indirect_light
    assert (s.ceiling_reflectance, s.wall_reflectance, s.floor_reflectance) == (0.7, 0.5, 0.2)
    assert s.standard_name == "EN 12464-1"
    assert s.minimum_illuminance == 300.0
    assert s.minimum_uniformity == 0.4


@pytest.mark.parametrize(
    "env,enc,expected",
    [
        (MaintenanceCategory.VERY_CLEAN, LuminaireEnclosure.SEALED_IP65, 0.90),
        (MaintenanceCategory.NORMAL, LuminaireEnclosure.ENCLOSED_IP54, 0.82),
        (MaintenanceCategory.VERY_DIRTY, LuminaireEnclosure.OPEN_IP20, 0.67),
        (MaintenanceCategory.DIRTY, LuminaireEnclosure.SEALED_IP65, 0.80),
        (MaintenanceCategory.CLEAN, LuminaireEnclosure.OPEN_IP20, 0.80),
    ],
)
def test_maintenance_table(env, enc, expected):
    assert lookup_maintenance_factor(env, enc) == expected
    assert AnalysisSettings(environment=env, luminaire_enclosure=enc).get_maintenance_factor() == expected


def test_legacy_scalar_maintenance_factor():
    s = AnalysisSettings(use_maintenance_table=False, maintenance_factor=0.75)
    assert s.get_maintenance_factor() == 0.75


@pytest.mark.parametrize(
    "kwargs",
    [
        {"grid_spacing": 0.0},
        {"grid_spacing": -1.0},
        {"work_plane_heights": ()},
        {"maintenance_factor": 0.0},
        {"maintenance_factor": 1.2},
        {"wall_reflectance": 1.5},
        {"floor_reflectance": -0.1},
        {"source_position_policy": "middle"},
        {"environment": "SPOTLESS"},
    ],
)
def test_invalid_settings(kwargs):
    with pytest.raises(SettingsError):
        AnalysisSettings(**kwargs)


def test_any_positive_spacing_is_accepted():
    assert AnalysisSettings(grid_spacing=0.37).grid_spacing == 0.37


def test_from_dict_accepts_enum_names_and_single_height():
    s = settings_from_dict(
        {
            "grid_spacing": 0.5,
            "work_plane_height": 0.85,
            "environment": "dirty",
            "luminaire_enclosure": 2,
            "ies_search_paths": ["lib"],
        }
    )
    assert s.work_plane_heights == (0.85,)
    assert s.environment is MaintenanceCategory.DIRTY
    assert s.luminaire_enclosure is LuminaireEnclosure.OPEN_IP20
    assert s.get_maintenance_factor() == 0.70
    assert s.ies_search_paths == ("lib",)


def test_to_dict_round_trip():
    s = AnalysisSettings(grid_spacing=0.25, work_plane_heights=(0.0, 0.8), environment=MaintenanceCategory.CLEAN)
    assert settings_from_dict(s.to_dict()) == s


def test_with_overrides():
    s = AnalysisSettings().with_overrides(grid_spacing=2.0)
    assert s.grid_spacing == 2.0
