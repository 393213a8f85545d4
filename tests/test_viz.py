"""Tests for the bedflow.viz module.

Render smoke tests verify that plotting functions produce figures without
errors on a headless backend.
"""

import os
import tempfile
import unittest

import numpy as np
import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for headless testing
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from bedflow.errors import InvalidParameter  # noqa: E402
from bedflow.predict.occupancy import simulate_occupancy  # noqa: E402
from bedflow.predict.scenarios import forecast_beds  # noqa: E402
from bedflow.viz import plot_beds  # noqa: E402


def _sampler(n):
    return np.arange(n) % 5 + 1


class TestPlotBeds(unittest.TestCase):
    """Verify that plot_beds produces figures without errors."""

    def setUp(self):
        self.merged = forecast_beds(
            "2020-03-20",
            n_observed=40,
            doubling_time=5,
            doubling_error=1,
            horizon_days=10,
            stay_sampler=_sampler,
            n_replicates=3,
        )

    def tearDown(self):
        plt.close("all")

    def test_none_returns_none(self):
        self.assertIsNone(plot_beds(None))

    def test_merged_forecast(self):
        fig = plot_beds(self.merged, title="Beds", return_figure=True)
        self.assertIsInstance(fig, Figure)
        ax = fig.axes[0]
        self.assertEqual(ax.get_ylabel(), "Daily numbers of beds")
        self.assertEqual(ax.get_title(), "Beds")
        self.assertEqual(ax.get_ylim()[0], 0)

    def test_single_scenario(self):
        fig = plot_beds(self.merged, scenario="high", return_figure=True)
        self.assertIsInstance(fig, Figure)

    def test_unknown_scenario(self):
        with self.assertRaises(InvalidParameter):
            plot_beds(self.merged, scenario="worst", return_figure=True)

    def test_occupancy_distribution(self):
        dist = simulate_occupancy(
            ["2020-03-01", "2020-03-02"], [3, 1], _sampler, n_replicates=2
        )
        fig = plot_beds(dist, quantiles=(0.1, 0.5), return_figure=True)
        self.assertIsInstance(fig, Figure)

    def test_median_only_quantiles(self):
        fig = plot_beds(self.merged, quantiles=(0.5,), return_figure=True)
        self.assertIsInstance(fig, Figure)

    def test_saves_to_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "beds.png")
            plot_beds(self.merged, media_file_path=path, return_figure=True)
            self.assertTrue(os.path.exists(path))
