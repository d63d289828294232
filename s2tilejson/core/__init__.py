"""Configuration for document defaults."""
