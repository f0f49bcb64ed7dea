"""Taichi-based analytic sphere ray tracer.

This package renders a flat array of spheres with one fixed directional
light, using Taichi kernels dispatched once per pixel:
- Perspective ray generation from normalized screen coordinates
- Time-seeded jitter for stochastic supersampling
- Closed-form ray-sphere intersection with nearest-hit reduction
- Fixed-depth mirror bounces with constant attenuation

Subpackages:
    core: Ray structures, jitter sampling, settings, the bounce integrator
        and the frame renderer
    geometry: Sphere primitive and intersection
    materials: Lambertian shading and mirror reflection
    scene: Sphere storage, nearest-hit queries and scene authoring
    camera: Screen camera with ray generation
    preview: Tone mapping and PNG export
"""

__version__ = "0.1.0"
