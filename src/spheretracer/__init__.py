"""Taichi-based Monte Carlo path tracer for scenes made of spheres.

This package renders sphere scenes with stochastic path tracing, with support for:
- Thin-lens camera with depth of field
- Lambertian, metal and dielectric materials
- Fixed-depth path integration with per-pixel random streams
- Batched rendering with deterministic, seedable output

Subpackages:
    core: Ray utilities, random sampling, the integrator and the render loop
    geometry: Sphere primitive and intersection
    materials: Scattering models (Lambertian, metal, dielectric)
    scene: World storage, scene manager, presets and scene files
    camera: Camera model with ray generation
    output: Image quantization and file export
"""

__version__ = "0.1.0"
