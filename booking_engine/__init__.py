"""Availability, slot allocation, tiered pricing and checkout gating for rental listings."""

__version__ = "0.1.0"
