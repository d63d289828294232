"""Structural schemas published alongside the metadata document."""
