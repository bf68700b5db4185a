"""Typer command-line interface for VolumeUp."""
