"""Collaborators that feed the soil: weather, light, and actors."""
