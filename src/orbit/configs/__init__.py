"""Bundled configuration files (model registry)."""
