"""Bastion: a deterministic grid tower-defense engine."""

__version__ = "0.1.0"
