"""
Host simulation boundary: internal data model and adapters.
"""

from simulation.adapter import SimulationAdapter, StaticSimulation, TypeInfo
from simulation.loader import load_simulation, load_simulation_file

__all__ = [
    "SimulationAdapter",
    "StaticSimulation",
    "TypeInfo",
    "load_simulation",
    "load_simulation_file",
]
