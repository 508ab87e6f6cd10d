"""Boundary layer: persistence and model provider adapters."""
