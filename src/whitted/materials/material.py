"""Surface material parameters and the named preset table.

A material describes how a surface mixes four contributions into its final
color. The albedo quadruple holds independent blend weights, in order:

    albedo[0]: diffuse lighting weight (scales diffuse_color)
    albedo[1]: specular highlight weight (scales white, 255)
    albedo[2]: mirror reflection weight
    albedo[3]: refraction (transmission) weight

The weights are not required to sum to 1. MIRROR, for example, uses a
specular weight of 10 to get a hard, saturated highlight.

Example:
    >>> from whitted.materials.material import Material, IVORY, get_preset
    >>> chalk = Material(diffuse_color=(230, 230, 220), albedo=(0.9, 0.05, 0.0, 0.0),
    ...                  specular_exponent=5.0)
    >>> get_preset("glass").refractive_index
    1.5
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class Material:
    """Immutable reflectance and transmission parameters.

    Attributes:
        diffuse_color: Base surface color as (R, G, B), each in [0, 255].
        albedo: Blend weights (diffuse, specular, reflection, refraction),
            each non-negative.
        specular_exponent: Phong exponent; higher gives a smaller, sharper
            highlight. Must be >= 0.
        refractive_index: Index of refraction used by Snell's law. Must be
            > 0; 1.0 means the surface does not bend transmitted rays.
    """

    diffuse_color: tuple[int, int, int]
    albedo: tuple[float, float, float, float]
    specular_exponent: float
    refractive_index: float = 1.0

    def __post_init__(self) -> None:
        if len(self.diffuse_color) != 3:
            raise ValueError(f"diffuse_color needs 3 channels, got {len(self.diffuse_color)}")
        for i, channel in enumerate(self.diffuse_color):
            if int(channel) != channel or channel < 0 or channel > 255:
                raise ValueError(
                    f"diffuse_color channel {i} = {channel} is not an integer in [0, 255]"
                )

        if len(self.albedo) != 4:
            raise ValueError(f"albedo needs 4 weights, got {len(self.albedo)}")
        for i, weight in enumerate(self.albedo):
            if not math.isfinite(weight) or weight < 0.0:
                raise ValueError(f"albedo weight {i} = {weight} must be finite and >= 0")

        if not math.isfinite(self.specular_exponent) or self.specular_exponent < 0.0:
            raise ValueError(f"specular_exponent must be >= 0, got {self.specular_exponent}")
        if not math.isfinite(self.refractive_index) or self.refractive_index <= 0.0:
            raise ValueError(f"refractive_index must be > 0, got {self.refractive_index}")

        object.__setattr__(self, "diffuse_color", tuple(int(c) for c in self.diffuse_color))
        object.__setattr__(self, "albedo", tuple(float(w) for w in self.albedo))
        object.__setattr__(self, "specular_exponent", float(self.specular_exponent))
        object.__setattr__(self, "refractive_index", float(self.refractive_index))


# =============================================================================
# Presets
# =============================================================================

IVORY = Material(
    diffuse_color=(100, 100, 75),
    albedo=(0.6, 0.3, 0.1, 0.0),
    specular_exponent=50.0,
)

RED_RUBBER = Material(
    diffuse_color=(75, 26, 26),
    albedo=(0.9, 0.1, 0.0, 0.0),
    specular_exponent=10.0,
)

BLACK_RUBBER = Material(
    diffuse_color=(10, 10, 10),
    albedo=(0.1, 0.1, 0.0, 0.0),
    specular_exponent=10.0,
)

MIRROR = Material(
    diffuse_color=(255, 255, 255),
    albedo=(0.0, 10.0, 0.8, 0.0),
    specular_exponent=1425.0,
)

GLASS = Material(
    diffuse_color=(153, 179, 204),
    albedo=(0.0, 0.5, 0.1, 0.8),
    specular_exponent=125.0,
    refractive_index=1.5,
)

PRESETS: Mapping[str, Material] = MappingProxyType(
    {
        "ivory": IVORY,
        "red_rubber": RED_RUBBER,
        "black_rubber": BLACK_RUBBER,
        "mirror": MIRROR,
        "glass": GLASS,
    }
)


def get_preset(name: str) -> Material:
    """Look up a preset material by name (case-insensitive).

    Raises:
        KeyError: If no preset has that name.
    """
    try:
        return PRESETS[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown material preset {name!r}; available: {', '.join(sorted(PRESETS))}"
        ) from None
