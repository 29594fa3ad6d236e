"""Game systems: RNG, pathfinding, waves, map generation."""

from bastion.systems.rng import DeterministicRNG
from bastion.systems.pathfinding import FlowField, can_place, compute_flow_field
from bastion.systems.waves import WaveDirector

__all__ = ["DeterministicRNG", "FlowField", "WaveDirector", "can_place", "compute_flow_field"]
