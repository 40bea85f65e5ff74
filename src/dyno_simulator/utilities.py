"""
Utilities Module
Helper functions for dyno data export and reporting.

Author: Mohith Sai Gorla
Date:   16-10-2026
"""

import csv
import json
from dataclasses import asdict, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from .geometry import liters_to_cubic_inches
from .simulator import RpmPoint, SimulationResult


def _to_serializable(value: Any) -> Any:
    """Convert numpy, enum and dataclass values into JSON-friendly types."""
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {k: _to_serializable(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {str(k): _to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_serializable(v) for v in value]
    if isinstance(value, (int, float, str, bool, type(None))):
        return value
    return str(value)


class DataExporter:
    """
    Export dyno results to various formats.

    Supports: CSV, JSON, plain-text dyno sheet
    """

    COLUMNS: List[str] = [f.name for f in fields(RpmPoint)]

    @staticmethod
    def export_to_csv(
        result: SimulationResult, filepath: str, variables: Optional[List[str]] = None
    ):
        """
        Export one row per dyno point to a CSV file.

        Args:
            result: SimulationResult from DynoSimulator
            filepath: Output file path
            variables: Column names to export (None = all)
        """
        columns = DataExporter.COLUMNS
        if variables:
            columns = [c for c in columns if c in variables]

        if len(columns) == 0 or len(result.points) == 0:
            raise ValueError("No data to export")

        with open(filepath, "w", newline="") as csvfile:
            writer = csv.writer(csvfile)
            writer.writerow(columns)
            for point in result.points:
                writer.writerow([getattr(point, c) for c in columns])

        print(f"Data exported to {filepath}")

    @staticmethod
    def export_to_json(data: Any, filepath: str):
        """
        Export data to a JSON file.

        Args:
            data: Dictionary, dataclass (e.g. SimulationResult) or list
            filepath: Output file path
        """
        with open(filepath, "w") as f:
            json.dump(_to_serializable(data), f, indent=2)

        print(f"Data exported to {filepath}")

    @staticmethod
    def create_performance_report(result: SimulationResult) -> str:
        """
        Create formatted dyno sheet string.

        Args:
            result: SimulationResult from DynoSimulator

        Returns:
            Formatted report string
        """
        s = result.summary
        report = []
        report.append("=" * 60)
        report.append("DYNO SHEET")
        report.append("=" * 60)
        report.append("")

        report.append("ENGINE:")
        report.append("-" * 60)
        report.append(
            f"  Displacement:           {result.displacement_liters:.2f} L "
            f"({liters_to_cubic_inches(result.displacement_liters):.0f} CID)"
        )
        report.append(f"  Model:                  {result.archetype.value}")
        report.append(f"  Effective Boost:        {result.effective_boost_psi:.1f} psi")
        report.append(f"  Compression Factor:     {result.compression_factor:.3f}")
        report.append(f"  Knock Factor:           {result.knock_factor:.3f}")
        report.append("")

        report.append("PEAK VALUES:")
        report.append("-" * 60)
        report.append(
            f"  Peak Power:             {s.peak_hp:.1f} HP @ {s.peak_hp_rpm} rpm"
        )
        report.append(
            f"  Peak Torque:            {s.peak_torque_lb_ft:.1f} lb·ft @ {s.peak_torque_rpm} rpm"
        )
        report.append(f"  Specific Power:         {s.hp_per_liter:.1f} HP/L")
        report.append(f"  Peak BMEP:              {s.peak_bmep_psi:.1f} psi")
        report.append("")

        report.append("AT PEAK POWER:")
        report.append("-" * 60)
        report.append(f"  BMEP:                   {s.bmep_psi_at_peak_hp:.1f} psi")
        report.append(f"  Airflow:                {s.cfm_at_peak_hp:.0f} CFM")
        report.append(
            f"  Fuel:                   {s.fuel_lb_per_hr_at_peak_hp:.1f} lb/hr "
            f"({s.fuel_gal_per_hr_at_peak_hp:.2f} gal/hr)"
        )
        report.append("")

        report.append("AREA UNDER THE CURVE:")
        report.append("-" * 60)
        report.append(f"  Average Torque:         {s.average_torque_lb_ft:.1f} lb·ft")
        report.append(f"  Average Power:          {s.average_hp:.1f} HP")
        report.append(f"  Powerband (90 %):       {s.powerband_rpm} rpm")
        report.append("")

        if result.warnings:
            report.append("NOTICES:")
            report.append("-" * 60)
            for msg in result.warnings:
                report.append(f"  - {msg}")
            report.append("")

        report.append("=" * 60)

        return "\n".join(report)

    @staticmethod
    def create_results_table(result: SimulationResult) -> str:
        """Fixed-width per-RPM table (RPM, HP, torque, VE, piston speed, ...)."""
        header = (
            f"{'RPM':>6} {'HP':>8} {'TQ':>8} {'VE%':>5} {'Up m/s':>7} "
            f"{'BMEP':>7} {'CFM':>6} {'lb/hr':>7} {'gal/hr':>7}"
        )
        rows = [header, "-" * len(header)]
        for p in result.points:
            rows.append(
                f"{p.rpm:>6d} {p.horsepower:>8.1f} {p.torque_lb_ft:>8.1f} "
                f"{p.ve_fraction * 100:>5.0f} {p.mean_piston_speed_mps:>7.2f} "
                f"{p.bmep_psi:>7.1f} {p.airflow_cfm:>6.0f} "
                f"{p.fuel_lb_per_hr:>7.1f} {p.fuel_gal_per_hr:>7.2f}"
            )
        return "\n".join(rows)


def calculate_statistics(data: List[float]) -> Dict[str, float]:
    """
    Calculate basic statistics for a data series.

    Args:
        data: List or array of numerical data

    Returns:
        Dictionary of statistics
    """
    data_array = np.array(data, dtype=float)

    stats = {
        "mean": float(np.mean(data_array)),
        "std": float(np.std(data_array, ddof=0)),
        "min": float(np.min(data_array)),
        "max": float(np.max(data_array)),
        "median": float(np.median(data_array)),
        "range": float(np.max(data_array) - np.min(data_array)),  # peak-to-peak
    }

    return stats
