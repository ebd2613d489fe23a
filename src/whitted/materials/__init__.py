"""Materials module for surface shading parameters.

Components:
    material: The Material dataclass and the named preset table

A material carries a diffuse color, four blend weights (diffuse, specular,
reflection, refraction), a Phong specular exponent and a refractive index.
Materials are plain immutable Python values; the scene upload copies them into
Taichi fields indexed by a deduplicated material ID.
"""

from .material import (
    BLACK_RUBBER,
    GLASS,
    IVORY,
    MIRROR,
    PRESETS,
    RED_RUBBER,
    Material,
    get_preset,
)

__all__ = [
    "Material",
    "PRESETS",
    "get_preset",
    "IVORY",
    "RED_RUBBER",
    "BLACK_RUBBER",
    "MIRROR",
    "GLASS",
]
