"""Pygame viewer."""
