"""
bedflow: a package for forecasting hospital bed occupancy during an outbreak.

This package projects daily admissions under exponential growth from a
doubling time, simulates each admission's length of stay, and aggregates the
simulated stays into daily bed counts with uncertainty bounds for low, mean
and high growth scenarios.
"""

__version__ = "0.1.0"
