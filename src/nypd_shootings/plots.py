from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator

import pandas as pd
import seaborn as sns
from matplotlib import pyplot as plt

from .aggregate import MONTH_LABELS, monthly_profile
from .config import PlotConfig


@contextmanager
def plot_style(config: PlotConfig) -> Iterator[None]:
    # Scoped to the figure being drawn; global rcParams stay untouched.
    rc = {"axes.spines.right": False, "axes.spines.top": False}
    with sns.axes_style(config.style, rc=rc), sns.plotting_context(config.context):
        yield


def _save(fig, path: Path, config: PlotConfig) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=config.dpi)
    plt.close(fig)
    return path


def plot_monthly_incidents(monthly: pd.DataFrame, figures_dir: Path, config: PlotConfig) -> Path:
    with plot_style(config):
        fig, ax = plt.subplots(figsize=config.figsize)
        ax.plot(monthly["month_start"], monthly["incidents"], color="#0B5ED7", linewidth=1.5)
        ax.scatter(monthly["month_start"], monthly["incidents"], color="#0B5ED7", s=12)
        ax.set_title("NYPD Shooting Incidents per Month")
        ax.set_xlabel("Month")
        ax.set_ylabel("Incidents")
        return _save(fig, figures_dir / "monthly_incidents.png", config)


def plot_incidents_by_year(monthly: pd.DataFrame, figures_dir: Path, config: PlotConfig) -> Path:
    data = monthly.assign(
        year=monthly["year"].astype(str),
        month_number=monthly["month_start"].dt.month,
    )
    with plot_style(config):
        fig, ax = plt.subplots(figsize=config.figsize)
        sns.lineplot(data=data, x="month_number", y="incidents", hue="year", marker="o", ax=ax)
        ax.set_xticks(range(1, 13))
        ax.set_xticklabels(MONTH_LABELS)
        ax.set_title("Monthly Shooting Incidents by Year")
        ax.set_xlabel("")
        ax.set_ylabel("Incidents")
        ax.legend(title="Year", bbox_to_anchor=(1.01, 1), loc="upper left", fontsize="small")
        return _save(fig, figures_dir / "incidents_by_year.png", config)


def plot_month_profile(monthly: pd.DataFrame, figures_dir: Path, config: PlotConfig) -> Path:
    profile = monthly_profile(monthly)
    with plot_style(config):
        fig, ax = plt.subplots(figsize=config.figsize)
        sns.barplot(data=profile, x="month", y="mean_incidents", color="#F1B434", ax=ax)
        ax.set_title("Average Shooting Incidents by Calendar Month")
        ax.set_xlabel("")
        ax.set_ylabel("Mean incidents")
        return _save(fig, figures_dir / "month_profile.png", config)


def plot_decomposition(decomposed: pd.DataFrame, figures_dir: Path, config: PlotConfig) -> Path:
    x = decomposed["month_start"]
    with plot_style(config):
        fig, axes = plt.subplots(4, 1, figsize=config.decomposition_figsize, sharex=True)
        axes[0].plot(x, decomposed["observed"], color="#233348")
        axes[0].set_title("Observed", loc="left")
        axes[1].plot(x, decomposed["trend"], color="#C43F3A", linewidth=2)
        axes[1].set_title("Trend", loc="left")
        axes[2].fill_between(x, decomposed["seasonal"], 0, color="#1AAAE6", alpha=0.5)
        axes[2].plot(x, decomposed["seasonal"], color="#1AAAE6")
        axes[2].set_title("Seasonal", loc="left")
        axes[3].scatter(x, decomposed["remainder"], color="#233348", s=10)
        axes[3].axhline(0, color="black", linewidth=1)
        axes[3].set_title("Remainder", loc="left")
        axes[3].set_xlabel("Month")
        return _save(fig, figures_dir / "decomposition.png", config)


def render_figures(
    monthly: pd.DataFrame,
    decomposed: pd.DataFrame,
    figures_dir: Path,
    config: PlotConfig,
) -> Dict[str, str]:
    outputs = {
        "monthly_incidents": str(plot_monthly_incidents(monthly, figures_dir, config)),
        "incidents_by_year": str(plot_incidents_by_year(monthly, figures_dir, config)),
        "month_profile": str(plot_month_profile(monthly, figures_dir, config)),
        "decomposition": str(plot_decomposition(decomposed, figures_dir, config)),
    }
    return outputs
