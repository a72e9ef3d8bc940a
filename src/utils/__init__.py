"""Configuration loading and export utilities."""
