"""Bundled specification documents."""
