"""
Visualization Module
Creates dyno-sheet plots for simulated power runs.

Author: Mohith Sai Gorla
Date: 16-10-2026
"""

import matplotlib.pyplot as plt
from matplotlib.gridspec import GridSpec
from typing import List, Optional, Sequence

from .simulator import SimulationResult


class DynoPlotter:
    """
    Creates dyno-style plots for simulation results.

    Supports:
    - Horsepower and torque vs RPM (twin axes)
    - Comparison of several runs
    - Derived metrics (BMEP, airflow, VE, fuel)
    """

    def __init__(self, style: str = "default"):
        """
        Initialize plotter with specified style.

        Args:
            style: Matplotlib style ('default', 'seaborn', 'ggplot')
        """
        if style != "default":
            try:
                plt.style.use(style)
            except (OSError, ValueError) as e:
                print(f"Warning: Style '{style}' not found, using default. Error: {e}")

        self.fig_size = (12, 8)
        self.dpi = 100

    @staticmethod
    def _finish(fig, save_path: Optional[str], label: str, show: bool):
        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches="tight")
            print(f"{label} saved to {save_path}")
        if show:
            plt.show()

    def plot_dyno_chart(
        self,
        result: SimulationResult,
        save_path: Optional[str] = None,
        title: str = "Dyno Chart",
        show: bool = True,
    ):
        """
        Plot horsepower and torque vs RPM with peaks annotated.

        Args:
            result: Dyno simulation result
            save_path: Optional path to save figure
            title: Figure title
            show: Call plt.show() when done
        """
        fig, ax_hp = plt.subplots(figsize=self.fig_size, dpi=self.dpi)
        ax_tq = ax_hp.twinx()

        rpm = result.rpm
        s = result.summary

        ax_hp.plot(rpm, result.horsepower, "r-", linewidth=2, label="Horsepower")
        ax_tq.plot(rpm, result.torque, "b-", linewidth=2, label="Torque (lb·ft)")

        ax_hp.plot(s.peak_hp_rpm, s.peak_hp, "ro", markersize=8)
        ax_hp.annotate(
            f"{s.peak_hp:.0f} HP @ {s.peak_hp_rpm}",
            (s.peak_hp_rpm, s.peak_hp),
            textcoords="offset points",
            xytext=(0, 10),
            ha="center",
        )
        ax_tq.plot(s.peak_torque_rpm, s.peak_torque_lb_ft, "bo", markersize=8)
        ax_tq.annotate(
            f"{s.peak_torque_lb_ft:.0f} lb·ft @ {s.peak_torque_rpm}",
            (s.peak_torque_rpm, s.peak_torque_lb_ft),
            textcoords="offset points",
            xytext=(0, -18),
            ha="center",
        )

        ax_hp.set_xlabel("Engine Speed (rpm)", fontsize=12, fontweight="bold")
        ax_hp.set_ylabel("Horsepower", fontsize=12, fontweight="bold", color="r")
        ax_tq.set_ylabel("Torque (lb·ft)", fontsize=12, fontweight="bold", color="b")
        ax_hp.set_title(title, fontsize=14, fontweight="bold")
        ax_hp.grid(True, alpha=0.3)

        lines = ax_hp.get_lines()[:1] + ax_tq.get_lines()[:1]
        ax_hp.legend(lines, [line.get_label() for line in lines], loc="upper left")

        ax_hp.text(
            0.98,
            0.05,
            f"{result.displacement_liters:.2f} L  |  {s.hp_per_liter:.1f} HP/L",
            transform=ax_hp.transAxes,
            fontsize=11,
            horizontalalignment="right",
            bbox=dict(boxstyle="round", facecolor="wheat", alpha=0.5),
        )

        fig.tight_layout()
        self._finish(fig, save_path, "Dyno chart", show)
        return fig

    def plot_comparison(
        self,
        results: Sequence[SimulationResult],
        labels: List[str],
        save_path: Optional[str] = None,
        show: bool = True,
    ):
        """
        Overlay horsepower and torque of several runs.

        Args:
            results: Dyno simulation results
            labels: One legend label per result
            save_path: Optional path to save figure
            show: Call plt.show() when done
        """
        if len(results) != len(labels):
            raise ValueError(
                f"Got {len(results)} results but {len(labels)} labels"
            )

        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 10), sharex=True)

        for result, label in zip(results, labels):
            ax1.plot(result.rpm, result.horsepower, linewidth=2, label=label)
            ax2.plot(result.rpm, result.torque, linewidth=2, label=label)

        ax1.set_ylabel("Horsepower", fontsize=12, fontweight="bold")
        ax1.set_title("Power Comparison", fontsize=14, fontweight="bold")
        ax1.grid(True, alpha=0.3)
        ax1.legend(fontsize=10)

        ax2.set_xlabel("Engine Speed (rpm)", fontsize=12, fontweight="bold")
        ax2.set_ylabel("Torque (lb·ft)", fontsize=12, fontweight="bold")
        ax2.set_title("Torque Comparison", fontsize=14, fontweight="bold")
        ax2.grid(True, alpha=0.3)
        ax2.legend(fontsize=10)

        fig.tight_layout()
        self._finish(fig, save_path, "Comparison plot", show)
        return fig

    def plot_derived_metrics(
        self,
        result: SimulationResult,
        save_path: Optional[str] = None,
        show: bool = True,
    ):
        """
        Create 4-panel plot of BMEP, airflow, VE and fuel flow.

        Args:
            result: Dyno simulation result
            save_path: Optional path to save figure
            show: Call plt.show() when done
        """
        fig = plt.figure(figsize=(16, 12))
        gs = GridSpec(2, 2, figure=fig, hspace=0.3, wspace=0.3)
        rpm = result.rpm

        ax1 = fig.add_subplot(gs[0, 0])
        ax1.plot(rpm, result.column("bmep_psi"), "b-", linewidth=2)
        ax1.set_xlabel("Engine Speed (rpm)", fontweight="bold")
        ax1.set_ylabel("BMEP (psi)", fontweight="bold")
        ax1.set_title("Brake Mean Effective Pressure", fontweight="bold")
        ax1.grid(True, alpha=0.3)

        ax2 = fig.add_subplot(gs[0, 1])
        ax2.plot(rpm, result.column("airflow_cfm"), "g-", linewidth=2)
        ax2.set_xlabel("Engine Speed (rpm)", fontweight="bold")
        ax2.set_ylabel("Airflow (CFM)", fontweight="bold")
        ax2.set_title("Airflow", fontweight="bold")
        ax2.grid(True, alpha=0.3)

        ax3 = fig.add_subplot(gs[1, 0])
        ax3.plot(rpm, result.column("ve_fraction") * 100.0, "m-", linewidth=2)
        ax3.set_xlabel("Engine Speed (rpm)", fontweight="bold")
        ax3.set_ylabel("VE (%)", fontweight="bold")
        ax3.set_title("Estimated Volumetric Efficiency", fontweight="bold")
        ax3.grid(True, alpha=0.3)

        ax4 = fig.add_subplot(gs[1, 1])
        ax4.plot(rpm, result.column("fuel_lb_per_hr"), "r-", linewidth=2)
        ax4.set_xlabel("Engine Speed (rpm)", fontweight="bold")
        ax4.set_ylabel("Fuel (lb/hr)", fontweight="bold")
        ax4.set_title("Fuel Flow", fontweight="bold")
        ax4.grid(True, alpha=0.3)

        fig.suptitle("Derived Dyno Metrics", fontsize=16, fontweight="bold")

        self._finish(fig, save_path, "Derived metrics plot", show)
        return fig
