"""
Basic Dyno Simulation Example
Demonstrates simple usage of the virtual dyno.

Author: Mohith Sai Gorla
Date: 16-10-2026
"""

import matplotlib.pyplot as plt
import os

# Headless environment check for observability stability
if "DISPLAY" not in os.environ and os.name != "nt":
    import matplotlib
    matplotlib.use("Agg")
    print("Physical display not detected. Using 'Agg' backend for plot exports.")

from dyno_simulator.engine_config import (
    EngineConfiguration,
    GeometryParameters,
    InductionParameters,
    ValvetrainParameters,
    SweepParameters,
    FuelType,
    InductionType,
    ValvetrainType,
    create_default_na_inline_4,
    create_default_turbo_inline_4,
    create_default_light_duty_diesel,
)
from dyno_simulator.simulator import DynoSimulator, simulate
from dyno_simulator.visualization import DynoPlotter
from dyno_simulator.utilities import DataExporter


def example_1_na_inline_4():
    """Example 1: Naturally aspirated inline-4 dyno pull"""

    print("=" * 70)
    print("EXAMPLE 1: Naturally Aspirated Inline-4")
    print("=" * 70)
    print()

    config = create_default_na_inline_4()
    simulator = DynoSimulator(config)
    results = simulator.simulate()

    metrics = simulator.calculate_performance_metrics(results)
    print("\nPerformance Metrics:")
    print(
        f"  Peak Power:        {metrics['peak_hp']:.1f} HP @ {metrics['peak_hp_rpm']} rpm"
    )
    print(
        f"  Peak Torque:       {metrics['peak_torque_lb_ft']:.1f} lb·ft "
        f"@ {metrics['peak_torque_rpm']} rpm"
    )
    print(f"  Specific Power:    {metrics['hp_per_liter']:.1f} HP/L")
    print(f"  Airflow @ Peak:    {metrics['cfm_at_peak_hp']:.0f} CFM")
    print()

    plotter = DynoPlotter()
    plotter.plot_dyno_chart(
        results, save_path="./example1_dyno.png", title="NA Inline-4", show=False
    )

    DataExporter.export_to_csv(results, "./example1_dyno_data.csv")


def example_2_custom_turbo_v6():
    """Example 2: Custom turbocharged V6"""

    print("=" * 70)
    print("EXAMPLE 2: Custom Twin-Turbo V6")
    print("=" * 70)
    print()

    config = EngineConfiguration(
        geometry=GeometryParameters(
            num_cylinders=6,
            bore_mm=92.5,  # mm
            stroke_mm=86.0,  # mm
            compression_ratio=9.8,
        ),
        induction=InductionParameters(
            fuel_type=FuelType.GASOLINE,
            induction_type=InductionType.TURBOCHARGED,
            boost_psi=14.0,
        ),
        valvetrain=ValvetrainParameters(ValvetrainType.DOHC, 4),
        sweep=SweepParameters(redline_rpm=7000, rpm_step=250),
    )

    results = simulate(config)
    s = results.summary

    print(DataExporter.create_performance_report(results))

    print("\nTurbo Results:")
    print(f"  Effective Boost:   {results.effective_boost_psi:.1f} psi")
    print(f"  Knock Factor:      {results.knock_factor:.3f}")
    print(f"  Powerband:         {s.powerband_rpm} rpm")
    print()

    plotter = DynoPlotter()
    plotter.plot_derived_metrics(
        results, save_path="./example2_derived.png", show=False
    )


def example_3_induction_comparison():
    """Example 3: Compare NA, turbo and diesel pulls"""

    print("=" * 70)
    print("EXAMPLE 3: Induction Comparison")
    print("=" * 70)
    print()

    labels = ["NA I4", "Turbo I4", "Diesel I6"]
    results = [
        simulate(factory())
        for factory in (
            create_default_na_inline_4,
            create_default_turbo_inline_4,
            create_default_light_duty_diesel,
        )
    ]

    for label, result in zip(labels, results):
        s = result.summary
        print(
            f"  {label:<10} {s.peak_hp:7.1f} HP @ {s.peak_hp_rpm:5d}   "
            f"{s.peak_torque_lb_ft:7.1f} lb·ft @ {s.peak_torque_rpm:5d}"
        )
    print()

    plotter = DynoPlotter()
    plotter.plot_comparison(
        results, labels, save_path="./example3_comparison.png", show=False
    )


def example_4_compression_study():
    """Example 4: Parametric study of compression ratio on a turbo engine"""

    print("=" * 70)
    print("EXAMPLE 4: Parametric Study - Compression Ratio Effect")
    print("=" * 70)
    print()

    base = create_default_turbo_inline_4().to_dict()
    compression_ratios = [8.5, 9.0, 9.5, 10.0, 10.5, 11.0, 11.5, 12.0]
    peak_powers = []

    for cr in compression_ratios:
        base["geometry"]["compression_ratio"] = cr
        result = simulate(EngineConfiguration.from_dict(base))
        peak_powers.append(result.summary.peak_hp)
        print(
            f"  CR {cr:.1f}: boost={result.effective_boost_psi:.1f} psi, "
            f"P={peak_powers[-1]:.1f} HP"
        )

    print()

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(compression_ratios, peak_powers, "ro-", linewidth=2, markersize=8)
    ax.set_xlabel("Compression Ratio", fontsize=12, fontweight="bold")
    ax.set_ylabel("Peak Power (HP)", fontsize=12, fontweight="bold")
    ax.set_title("Knock-Limited Turbo: Compression Ratio vs Power", fontweight="bold")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig("./example4_compression_study.png", dpi=300, bbox_inches="tight")
    print("Compression study plot saved to ./example4_compression_study.png")

    print("Parametric study complete!")


def main():
    """Run all examples"""

    print("\n")
    print("╔" + "═" * 68 + "╗")
    print("║" + " " * 18 + "VIRTUAL DYNO EXAMPLES" + " " * 29 + "║")
    print("╚" + "═" * 68 + "╝")
    print("\n")

    # Run examples
    example_1_na_inline_4()
    print("\n" + "─" * 70 + "\n")

    example_2_custom_turbo_v6()
    print("\n" + "─" * 70 + "\n")

    example_3_induction_comparison()
    print("\n" + "─" * 70 + "\n")

    example_4_compression_study()

    print("\n" + "═" * 70)
    print("All examples completed successfully!")
    print("═" * 70 + "\n")


if __name__ == "__main__":
    main()
