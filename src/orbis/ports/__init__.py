# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for the external collaborators of the propagation core.

Data providers, body shapes and ephemerides implement these; the domain
models only rely on the structural shape.
"""
from orbis.ports.environment import (
    BodyShape,
    CelestialBodyEphemeris,
    IndexProvider,
    SolarActivityProvider,
)

__all__ = [
    "BodyShape",
    "CelestialBodyEphemeris",
    "IndexProvider",
    "SolarActivityProvider",
]
