"""Pipeline Tracker: companies moving through a fixed sales/delivery pipeline."""

__version__ = "0.1.0"
