"""Soil fields and the per-tick passes that act on them."""
