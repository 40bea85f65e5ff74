"""
Tests for export, reporting and plotting helpers.
"""

import argparse
import csv
import json

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from dyno_simulator.__main__ import run
from dyno_simulator.engine_config import EngineConfiguration, create_default_pushrod_v8
from dyno_simulator.simulator import simulate
from dyno_simulator.utilities import DataExporter, calculate_statistics
from dyno_simulator.visualization import DynoPlotter


@pytest.fixture(scope="module")
def result():
    return simulate(create_default_pushrod_v8())


class TestDataExporter:
    def test_csv_export(self, result, tmp_path):
        path = tmp_path / "dyno.csv"
        DataExporter.export_to_csv(result, str(path))
        with open(path, newline="") as fh:
            rows = list(csv.reader(fh))
        assert rows[0] == DataExporter.COLUMNS
        assert len(rows) == len(result.points) + 1
        assert int(rows[1][0]) == 1000

    def test_csv_column_subset(self, result, tmp_path):
        path = tmp_path / "subset.csv"
        DataExporter.export_to_csv(result, str(path), variables=["rpm", "horsepower"])
        with open(path, newline="") as fh:
            header = next(csv.reader(fh))
        assert header == ["rpm", "horsepower"]

    def test_csv_nothing_to_export(self, result, tmp_path):
        with pytest.raises(ValueError):
            DataExporter.export_to_csv(result, str(tmp_path / "x.csv"), variables=["boost"])

    def test_json_export(self, result, tmp_path):
        path = tmp_path / "dyno.json"
        DataExporter.export_to_json(
            {"rpm": result.rpm, "archetype": result.archetype, "points": result.points},
            str(path),
        )
        with open(path) as fh:
            data = json.load(fh)
        assert data["archetype"] == "na_pushrod"
        assert data["rpm"][0] == 1000.0
        assert data["points"][0]["rpm"] == 1000

    def test_performance_report(self, result):
        report = DataExporter.create_performance_report(result)
        assert "DYNO SHEET" in report
        assert "Peak Power" in report
        assert f"{result.summary.peak_hp:.1f} HP" in report
        assert "NOTICES" not in report

    def test_report_lists_notices(self):
        with pytest.warns(UserWarning):
            config = EngineConfiguration.from_dict(
                {
                    "geometry": {"num_cylinders": 4, "bore_mm": 87, "stroke_mm": 99, "compression_ratio": 16.0},
                }
            )
        report = DataExporter.create_performance_report(simulate(config))
        assert "NOTICES" in report
        assert "Compression ratio" in report

    def test_results_table(self, result):
        table = DataExporter.create_results_table(result).splitlines()
        assert len(table) == len(result.points) + 2
        assert table[0].split()[0] == "RPM"


def test_calculate_statistics():
    stats = calculate_statistics([1.0, 2.0, 3.0, 4.0])
    assert stats["mean"] == pytest.approx(2.5)
    assert stats["median"] == pytest.approx(2.5)
    assert stats["range"] == pytest.approx(3.0)
    assert stats["std"] == pytest.approx(np.std([1.0, 2.0, 3.0, 4.0]))


class TestDynoPlotter:
    def setup_method(self):
        self.plotter = DynoPlotter()

    def teardown_method(self):
        plt.close("all")

    def test_dyno_chart_saved(self, result, tmp_path):
        path = tmp_path / "dyno.png"
        fig = self.plotter.plot_dyno_chart(result, save_path=str(path), show=False)
        assert fig is not None
        assert path.exists()

    def test_derived_metrics(self, result):
        fig = self.plotter.plot_derived_metrics(result, show=False)
        assert len(fig.axes) == 4

    def test_comparison_label_mismatch(self, result):
        with pytest.raises(ValueError):
            self.plotter.plot_comparison([result, result], ["only one"], show=False)

    def test_comparison(self, result):
        fig = self.plotter.plot_comparison([result], ["v8"], show=False)
        assert len(fig.axes) == 2


def _cli_args(**overrides):
    args = dict(
        preset="na-i4",
        config=None,
        redline=None,
        step=None,
        boost=None,
        compression=None,
        csv=None,
        json=None,
        plot=None,
    )
    args.update(overrides)
    return argparse.Namespace(**args)


class TestCommandLine:
    def teardown_method(self):
        plt.close("all")

    def test_preset_run(self, capsys):
        assert run(_cli_args(preset="diesel-i6")) == 0
        out = capsys.readouterr().out
        assert "DYNO RUN: diesel-i6" in out
        assert "DYNO SHEET" in out

    def test_overrides_and_exports(self, tmp_path, capsys):
        csv_path = tmp_path / "run.csv"
        json_path = tmp_path / "run.json"
        plot_path = tmp_path / "run.png"
        code = run(
            _cli_args(
                preset="turbo-i4",
                redline=6000,
                step=500,
                csv=str(csv_path),
                json=str(json_path),
                plot=str(plot_path),
            )
        )
        assert code == 0
        assert csv_path.exists() and plot_path.exists()
        with open(json_path) as fh:
            data = json.load(fh)
        assert data["config"]["sweep"]["redline_rpm"] == 6000
        assert len(data["points"]) == 11

    def test_invalid_override(self, capsys):
        assert run(_cli_args(redline=1500)) == 1
        assert "Error:" in capsys.readouterr().out

    def test_missing_config_file(self, tmp_path, capsys):
        assert run(_cli_args(preset=None, config=str(tmp_path / "missing.json"))) == 1
        assert "Error:" in capsys.readouterr().out
