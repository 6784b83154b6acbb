"""Humus - a two-field soil moisture and nitrogen simulation."""

__version__ = "0.1.0"
