"""Visualisation of bed occupancy forecasts."""

from bedflow.viz.beds import plot_beds

__all__ = ["plot_beds"]
