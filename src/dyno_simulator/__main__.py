"""
CLI entry point for dyno_simulator.
"""
import argparse
import dataclasses
import sys
import warnings

from .engine_config import PRESETS, EngineConfiguration
from .simulator import DynoSimulator
from .utilities import DataExporter


def load_config(args) -> EngineConfiguration:
    if args.config:
        config = EngineConfiguration.from_json(args.config)
    else:
        config = PRESETS[args.preset]()

    data = config.to_dict()
    if args.redline is not None:
        data["sweep"]["redline_rpm"] = args.redline
    if args.step is not None:
        data["sweep"]["rpm_step"] = args.step
    if args.boost is not None:
        data["induction"]["boost_psi"] = args.boost
    if args.compression is not None:
        data["geometry"]["compression_ratio"] = args.compression
    return EngineConfiguration.from_dict(data)


def run(args) -> int:
    # Notices are printed with the report rather than as Python warnings.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            config = load_config(args)
            simulator = DynoSimulator(config)
        except (ValueError, KeyError, FileNotFoundError) as exc:
            print(f"Error: {exc}")
            return 1

    result = simulator.simulate()
    label = args.config or args.preset

    print("\n" + "═" * 60)
    print(f"  DYNO RUN: {label}")
    print("═" * 60)
    print(DataExporter.create_results_table(result))
    print(DataExporter.create_performance_report(result))

    exporter = DataExporter()
    if args.csv:
        exporter.export_to_csv(result, args.csv)
    if args.json:
        exporter.export_to_json(
            {
                "config": config.to_dict(),
                "summary": dataclasses.asdict(result.summary),
                "metrics": simulator.calculate_performance_metrics(result),
                "points": result.points,
            },
            args.json,
        )
    if args.plot:
        import matplotlib

        matplotlib.use("Agg")
        from .visualization import DynoPlotter

        DynoPlotter().plot_dyno_chart(
            result, save_path=args.plot, title=f"Dyno: {label}", show=False
        )
    return 0


def main():
    parser = argparse.ArgumentParser(description="Virtual Dyno Simulator CLI")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", choices=sorted(PRESETS), default="na-i4", help="Engine preset to run (default: na-i4)")
    source.add_argument("--config", help="Engine configuration JSON file")
    parser.add_argument("--redline", type=int, help="Override redline (rpm)")
    parser.add_argument("--step", type=int, help="Override RPM step")
    parser.add_argument("--boost", type=float, help="Override boost (psi)")
    parser.add_argument("--compression", type=float, help="Override compression ratio")
    parser.add_argument("--csv", help="Export per-RPM data to this CSV file")
    parser.add_argument("--json", help="Export summary and data to this JSON file")
    parser.add_argument("--plot", help="Save a dyno chart image to this path")

    args = parser.parse_args()
    sys.exit(run(args))

if __name__ == "__main__":
    main()
