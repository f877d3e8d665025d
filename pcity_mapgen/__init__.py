"""
Procedural city street graph.

Points and paths model streets before they are rasterized into voxels.
"""

__version__ = "0.1.0"

from .exceptions import InvalidArgumentError
from .core import (
    AleaPRNG,
    Point,
    Path,
    WaveOptions,
    iter_network,
    network_paths,
    network_length,
    network_to_dict,
)
from .utils.context import GraphContext, get_context, set_context, reset_context

__all__ = [
    'InvalidArgumentError',
    'AleaPRNG',
    'Point',
    'Path',
    'WaveOptions',
    'iter_network',
    'network_paths',
    'network_length',
    'network_to_dict',
    'GraphContext',
    'get_context',
    'set_context',
    'reset_context',
]
