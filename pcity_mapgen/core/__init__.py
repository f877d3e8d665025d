"""
Core street graph: points, paths and the geometry they are built on.
"""

from .alea_prng import AleaPRNG
from .point import Point
from .path import Path, WaveOptions
from .network import iter_network, network_paths, network_length, network_to_dict

__all__ = ['AleaPRNG', 'Point', 'Path', 'WaveOptions',
           'iter_network', 'network_paths', 'network_length', 'network_to_dict']
