"""
Unit tests for engine configuration: validation, corrections, serialisation.
"""

import math
import warnings

import pytest

from dyno_simulator.engine_config import (
    PRESETS,
    REDLINE_MAX_RPM,
    REDLINE_MIN_RPM,
    EngineConfiguration,
    FuelType,
    GeometryParameters,
    InductionParameters,
    InductionType,
    SweepParameters,
    TuningParameters,
    ValvetrainParameters,
    ValvetrainType,
    create_default_na_inline_4,
)
from dyno_simulator.fuel_properties import get_fuel_properties


def _geometry(**kwargs):
    params = dict(num_cylinders=4, bore_mm=86.0, stroke_mm=86.0, compression_ratio=10.5)
    params.update(kwargs)
    return GeometryParameters(**params)


class TestGeometryParameters:
    def test_displacement_recomputed(self):
        geo = _geometry()
        assert geo.displacement_liters == pytest.approx(1.998, abs=1e-3)

    def test_square_engine(self):
        assert _geometry().bore_stroke_ratio == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "field, value",
        [
            ("num_cylinders", 0),
            ("bore_mm", 0.0),
            ("stroke_mm", -10.0),
            ("compression_ratio", 1.0),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValueError, match=field):
            _geometry(**{field: value})


class TestSectionValidation:
    def test_negative_boost_rejected(self):
        with pytest.raises(ValueError):
            InductionParameters(FuelType.GASOLINE, InductionType.TURBOCHARGED, -1.0)

    @pytest.mark.parametrize("valves", [1, 6])
    def test_valve_count_range(self, valves):
        with pytest.raises(ValueError):
            ValvetrainParameters(ValvetrainType.DOHC, valves)

    def test_tuning_limits(self):
        with pytest.raises(ValueError):
            TuningParameters(peak_ve_percent=0.0)
        with pytest.raises(ValueError):
            TuningParameters(size_penalty_percent_per_liter=-1.0)
        with pytest.raises(ValueError):
            TuningParameters(piston_speed_limit_mps=0.0)

    def test_sweep_limits(self):
        with pytest.raises(ValueError):
            SweepParameters(redline_rpm=7000, rpm_step=0)

    def test_num_points(self):
        assert SweepParameters(7000, 250).num_points == 25
        assert SweepParameters(7100, 250).num_points == 25
        assert SweepParameters(6500, 100).num_points == 56


class TestCrossValidation:
    def test_redline_below_minimum(self):
        with pytest.raises(ValueError, match="EngineConfiguration errors"):
            EngineConfiguration(geometry=_geometry(), sweep=SweepParameters(1500, 100))

    def test_step_not_below_redline(self):
        with pytest.raises(ValueError, match="rpm_step"):
            EngineConfiguration(geometry=_geometry(), sweep=SweepParameters(3000, 3000))

    def test_errors_collected_in_one_message(self):
        with pytest.raises(ValueError) as exc_info:
            EngineConfiguration(geometry=_geometry(), sweep=SweepParameters(1500, 2000))
        message = str(exc_info.value)
        assert "redline_rpm" in message
        assert "rpm_step" in message

    def test_redline_clamped_with_warning(self):
        with pytest.warns(UserWarning, match="clamped"):
            config = EngineConfiguration(
                geometry=_geometry(), sweep=SweepParameters(20000, 500)
            )
        assert config.sweep.redline_rpm == REDLINE_MAX_RPM
        assert config.sweep.rpm_step == 500
        assert len(config.notices) == 1

    def test_boost_forced_to_zero_when_naturally_aspirated(self):
        with pytest.warns(UserWarning, match="forced to 0"):
            config = EngineConfiguration(
                geometry=_geometry(),
                induction=InductionParameters(
                    FuelType.GASOLINE, InductionType.NATURALLY_ASPIRATED, 12.0
                ),
            )
        assert config.induction.boost_psi == 0.0
        assert config.induction.induction_type is InductionType.NATURALLY_ASPIRATED

    def test_compression_notice(self):
        with pytest.warns(UserWarning, match="Compression ratio"):
            config = EngineConfiguration(geometry=_geometry(compression_ratio=20.0))
        assert any("Compression ratio" in n for n in config.notices)

    def test_five_valve_notice(self):
        with pytest.warns(UserWarning, match="valves per cylinder"):
            EngineConfiguration(
                geometry=_geometry(), valvetrain=ValvetrainParameters(ValvetrainType.DOHC, 5)
            )

    def test_clean_configuration_has_no_notices(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            config = EngineConfiguration(geometry=_geometry())
        assert config.notices == []


class TestPresets:
    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_presets_are_clean(self, name):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            config = PRESETS[name]()
        assert config.displacement_liters > 0.0
        assert config.notices == []

    def test_na_inline_4(self):
        config = create_default_na_inline_4()
        assert config.induction.fuel_type is FuelType.GASOLINE
        assert not config.induction.is_boosted
        assert config.sweep.redline_rpm == 7500

    def test_diesel_preset(self):
        config = PRESETS["diesel-i6"]()
        assert config.induction.fuel_type is FuelType.DIESEL
        assert config.sweep.redline_rpm < 4000


class TestSerialisation:
    def test_dict_round_trip(self):
        for factory in PRESETS.values():
            config = factory()
            assert EngineConfiguration.from_dict(config.to_dict()) == config

    def test_enums_serialised_as_values(self):
        data = PRESETS["turbo-i4"]().to_dict()
        assert data["induction"]["induction_type"] == "turbo"
        assert data["valvetrain"]["valvetrain_type"] == "dohc"

    def test_json_round_trip(self, tmp_path):
        path = tmp_path / "engine.json"
        config = PRESETS["supercharged-v8"]()
        config.to_json(str(path))
        assert EngineConfiguration.from_json(str(path)) == config

    def test_only_geometry_required(self):
        config = EngineConfiguration.from_dict(
            {"geometry": {"num_cylinders": 6.0, "bore_mm": 90, "stroke_mm": 90}}
        )
        assert config.geometry.num_cylinders == 6
        assert config.sweep == SweepParameters()

    def test_missing_geometry(self):
        with pytest.raises(KeyError):
            EngineConfiguration.from_dict({"sweep": {"redline_rpm": 6000}})

    def test_unknown_fuel(self):
        data = create_default_na_inline_4().to_dict()
        data["induction"]["fuel_type"] = "kerosene"
        with pytest.raises(ValueError):
            EngineConfiguration.from_dict(data)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfiguration.from_json(str(tmp_path / "nope.json"))


class TestNonFiniteInputs:
    @pytest.mark.parametrize("field", ["bore_mm", "stroke_mm", "compression_ratio"])
    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_geometry_rejects_non_finite(self, field, value):
        with pytest.raises(ValueError, match=field):
            _geometry(**{field: value})

    @pytest.mark.parametrize(
        "field",
        ["peak_ve_percent", "size_penalty_percent_per_liter", "piston_speed_limit_mps"],
    )
    def test_tuning_rejects_nan(self, field):
        with pytest.raises(ValueError, match=field):
            TuningParameters(**{field: math.nan})

    def test_boost_rejects_nan(self):
        with pytest.raises(ValueError, match="boost_psi"):
            InductionParameters(FuelType.GASOLINE, InductionType.TURBOCHARGED, math.nan)

    def test_nan_from_json_rejected(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(
            '{"geometry": {"num_cylinders": 4, "bore_mm": NaN, "stroke_mm": 99}}'
        )
        with pytest.raises(ValueError):
            EngineConfiguration.from_json(str(path))


class TestStepAgainstClampedRedline:
    def test_step_above_clamped_redline_rejected(self):
        with pytest.raises(ValueError, match="rpm_step 16000"):
            EngineConfiguration(geometry=_geometry(), sweep=SweepParameters(20000, 16000))

    def test_step_below_clamped_redline_kept(self):
        with pytest.warns(UserWarning, match="clamped"):
            config = EngineConfiguration(
                geometry=_geometry(), sweep=SweepParameters(20000, 14000)
            )
        assert config.sweep.rpm_step < config.sweep.redline_rpm
        assert config.sweep.num_points == 2

    def test_minimum_redline_accepted(self):
        config = EngineConfiguration(
            geometry=_geometry(), sweep=SweepParameters(REDLINE_MIN_RPM, 100)
        )
        assert config.sweep.num_points == 11


class TestCompressionNoticeUsesFuelTable:
    @pytest.mark.parametrize("fuel", list(FuelType))
    def test_notice_band_centred_on_fuel_ideal(self, fuel):
        ideal = get_fuel_properties(fuel).ideal_compression_ratio
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            EngineConfiguration(
                geometry=_geometry(compression_ratio=ideal + 3.9),
                induction=InductionParameters(fuel, InductionType.TURBOCHARGED, 10.0),
            )
        with pytest.warns(UserWarning, match="Compression ratio"):
            EngineConfiguration(
                geometry=_geometry(compression_ratio=ideal + 4.1),
                induction=InductionParameters(fuel, InductionType.TURBOCHARGED, 10.0),
            )
