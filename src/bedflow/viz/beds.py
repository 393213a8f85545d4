"""Plot daily bed occupancy forecasts with an uncertainty ribbon.

Functions
---------
plot_beds : function
    Plot the median daily bed count with a shaded quantile band.
"""

from typing import Iterable, Optional, Union
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.dates as mdates
from matplotlib.ticker import MaxNLocator

from bedflow.errors import InvalidParameter
from bedflow.predict.occupancy import OccupancyDistribution
from bedflow.predict.scenarios import MergedForecast
from bedflow.validation import check_quantiles

primary_color = "#1f77b4"


def plot_beds(
    forecast: Union[MergedForecast, OccupancyDistribution, None],
    title: Optional[str] = None,
    quantiles: Iterable[float] = (0.025, 0.5),
    scenario: Optional[str] = None,
    media_file_path: Optional[Path] = None,
    return_figure=False,
):
    """Plot daily bed numbers with a shaded uncertainty ribbon.

    Parameters
    ----------
    forecast : MergedForecast or OccupancyDistribution or None
        Forecast to plot. A merged forecast is plotted as the pooled ensemble
        of all its scenarios unless ``scenario`` is given. If None, nothing is
        plotted and None is returned.
    title : str, optional
        Plot title.
    quantiles : iterable of float, default=(0.025, 0.5)
        The band spans the smallest quantile and its mirror ``1 - q``. The
        central line is the median.
    scenario : str, optional
        Plot a single scenario of a merged forecast.
    media_file_path : Path, optional
        Path where the plot should be saved.
    return_figure : bool, default=False
        If True, returns the figure instead of displaying it.

    Returns
    -------
    matplotlib.figure.Figure or None
    """
    if forecast is None:
        return None

    if isinstance(forecast, MergedForecast):
        if scenario is None:
            distribution = forecast.pooled()
        elif scenario in forecast.distributions:
            distribution = forecast.distributions[scenario]
        else:
            raise InvalidParameter(
                "scenario", scenario, f"must be one of {list(forecast.scenarios)}"
            )
    else:
        distribution = forecast

    qs = check_quantiles("quantiles", quantiles)
    lower_q = min(min(qs), 1 - min(qs))
    upper_q = 1 - lower_q
    bounds = distribution.quantiles(sorted({lower_q, 0.5, upper_q}))
    dates = distribution.dates

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.fill_between(
        dates,
        bounds[lower_q].to_numpy(),
        bounds[upper_q].to_numpy(),
        color=primary_color,
        alpha=0.3,
        label=f"{lower_q:.1%} - {upper_q:.1%} quantiles",
    )
    ax.plot(dates, bounds[0.5].to_numpy(), color=primary_color, label="Median")

    ax.xaxis.set_major_formatter(mdates.DateFormatter("%d %b %y"))
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right")
    ax.yaxis.set_major_locator(MaxNLocator(integer=True))
    ax.set_ylim(bottom=0, top=max(1.0, float(np.nanmax(bounds.to_numpy())) * 1.05))
    ax.set_xlabel(None)
    ax.set_ylabel("Daily numbers of beds")
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.2), ncol=2, frameon=False)

    plt.tight_layout()

    if media_file_path:
        plt.savefig(media_file_path, dpi=300, bbox_inches="tight")

    if return_figure:
        return fig
    else:
        plt.show()
        plt.close()
