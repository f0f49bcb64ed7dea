"""Demo scene used by the example script and integration tests.

Three colored spheres resting on a large grey sphere that acts as the floor,
framed by the fixed screen camera at (0, 0, -2).
"""

from sphere_tracer.scene.manager import SceneManager, SphereInfo

# (position, radius, color)
DEMO_SPHERES = (
    SphereInfo(position=(0.0, -101.0, 3.0), radius=100.0, color=(0.5, 0.5, 0.5, 1.0)),
    SphereInfo(position=(0.0, 0.0, 2.0), radius=1.0, color=(0.9, 0.2, 0.2, 1.0)),
    SphereInfo(position=(-2.1, 0.0, 2.5), radius=1.0, color=(0.2, 0.8, 0.3, 1.0)),
    SphereInfo(position=(2.1, 0.0, 2.5), radius=1.0, color=(0.2, 0.3, 0.9, 1.0)),
)


def create_demo_scene() -> SceneManager:
    """Upload the demo spheres and return the scene manager holding them."""
    return SceneManager(DEMO_SPHERES)
