"""Scene manager for authoring the sphere array.

The SceneManager keeps a Python-side list of SphereInfo records alongside the
Taichi sphere fields, validates input before upload and lets a whole scene be
replaced at once between frames.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_tracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere(position=(0, 0, 0), radius=1.0, color=(1, 0, 0, 1))
    0
"""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sphere_tracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        position: The center of the sphere.
        radius: The radius. Zero or negative radii are allowed but never hit.
        color: RGBA color. RGB contributes to shading; alpha is ignored by
            the integrator.
    """

    position: tuple[float, float, float]
    radius: float
    color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)


def _as_vector(values: Sequence[float], size: int, name: str) -> tuple[float, ...]:
    if len(values) != size:
        raise ValueError(f"{name} must have {size} components, got {len(values)}")
    result = tuple(float(v) for v in values)
    for i, component in enumerate(result):
        if not math.isfinite(component):
            raise ValueError(f"{name} component {i} = {component} is not finite")
    return result


def make_sphere_info(
    position: Sequence[float],
    radius: float,
    color: Sequence[float] = (1.0, 1.0, 1.0, 1.0),
) -> SphereInfo:
    """Validate raw values and build a SphereInfo.

    An RGB color is accepted and given an alpha of 1.

    Raises:
        ValueError: If a vector has the wrong arity or a value is not finite.
    """
    if len(color) == 3:
        color = (*color, 1.0)
    radius = float(radius)
    if not math.isfinite(radius):
        raise ValueError(f"Radius = {radius} is not finite")
    return SphereInfo(
        position=_as_vector(position, 3, "Position"),  # type: ignore[arg-type]
        radius=radius,
        color=_as_vector(color, 4, "Color"),  # type: ignore[arg-type]
    )


def upload_spheres(spheres: Iterable[SphereInfo]) -> int:
    """Replace the scene's sphere array.

    Args:
        spheres: Spheres in the order they should be tested.

    Returns:
        The number of spheres uploaded.

    Raises:
        RuntimeError: If there are more than MAX_SPHERES spheres.
    """
    spheres = list(spheres)
    if len(spheres) > MAX_SPHERES:
        raise RuntimeError(
            f"Scene has {len(spheres)} spheres, maximum is {MAX_SPHERES}"
        )
    clear_scene()
    for sphere in spheres:
        add_sphere(sphere.position, sphere.radius, sphere.color)
    logger.debug("Uploaded %d spheres", len(spheres))
    return len(spheres)


class SceneManager:
    """Scene manager for the sphere array.

    Every change is uploaded to the Taichi fields immediately, so the
    manager's list and the fields always agree.

    Attributes:
        spheres: SphereInfo for all spheres in the scene, in index order.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_sphere((0, -101, 0), 100.0, (0.5, 0.5, 0.5, 1.0))
        0
        >>> scene.add_sphere((0, 0, 0), 1.0, (1.0, 0.2, 0.2, 1.0))
        1
    """

    def __init__(self, spheres: Iterable[SphereInfo] = ()) -> None:
        """Initialize the scene, replacing whatever was uploaded before."""
        self.spheres: list[SphereInfo] = []
        self.set_spheres(spheres)

    def clear(self) -> None:
        """Remove every sphere."""
        clear_scene()
        self.spheres.clear()

    def add_sphere(
        self,
        position: Sequence[float],
        radius: float,
        color: Sequence[float] = (1.0, 1.0, 1.0, 1.0),
    ) -> int:
        """Add a sphere to the scene.

        Args:
            position: The center as (x, y, z).
            radius: The radius.
            color: RGBA (or RGB) color.

        Returns:
            The index of the new sphere.

        Raises:
            ValueError: If the values are malformed.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        info = make_sphere_info(position, radius, color)
        idx = add_sphere(info.position, info.radius, info.color)
        self.spheres.append(info)
        return idx

    def set_spheres(self, spheres: Iterable[SphereInfo]) -> None:
        """Replace all spheres at once."""
        spheres = list(spheres)
        upload_spheres(spheres)
        self.spheres = spheres

    def get_sphere(self, index: int) -> SphereInfo:
        """Get the SphereInfo at an index.

        Raises:
            ValueError: If the index is out of range.
        """
        if not 0 <= index < len(self.spheres):
            raise ValueError(f"Invalid sphere index: {index}")
        return self.spheres[index]

    @property
    def sphere_count(self) -> int:
        """Number of spheres currently uploaded."""
        return get_sphere_count()

    def __len__(self) -> int:
        return len(self.spheres)

    def __repr__(self) -> str:
        return f"SceneManager(spheres={len(self.spheres)})"
