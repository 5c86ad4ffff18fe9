"""Built-in sketches, registered on import."""

from ..sketch import register_sketch
from . import inset_square, layered_waves

BUILTIN_SKETCHES = (inset_square.SKETCH, layered_waves.SKETCH)

for _sketch in BUILTIN_SKETCHES:
    register_sketch(_sketch)

__all__ = ["BUILTIN_SKETCHES"]
