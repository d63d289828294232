"""Small helpers shared by the builder and the converter."""
