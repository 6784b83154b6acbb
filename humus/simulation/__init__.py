"""Simulation facade, configuration, and fixed-step scheduling."""
