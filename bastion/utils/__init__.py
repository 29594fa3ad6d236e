"""Logging setup and the game event log."""
