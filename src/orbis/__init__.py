# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbis

Orbit propagation core: continuous time scale, reference frame graph
with kinematic transforms, topocentric frames, Cartesian, Keplerian,
equinoctial and circular orbit parameterizations, perturbing force
models with switching functions (zonal gravity, third bodies, drag,
solar radiation pressure with shadow, constant thrust), adaptive
integrators with event location, and analytical, numerical and
semi-analytical propagators.
"""

from orbis.domain.errors import (
    OrbisError,
    ConfigurationError,
    FrameGraphError,
    Precondition,
    PropagationError,
    DateOutOfRangeError,
    ConvergenceError,
)
from orbis.domain.orbital_mechanics import (
    OrbitalConstants,
    KeplerSolverConfig,
    normalize_angle,
    true_to_eccentric,
    eccentric_to_true,
    eccentric_to_mean,
    mean_to_eccentric,
    keplerian_mean_motion,
    j2_raan_rate,
    j2_arg_perigee_rate,
)
from orbis.domain.time_systems import (
    AbsoluteDate,
    J2000_EPOCH,
    JULIAN_EPOCH,
    MODIFIED_JULIAN_EPOCH,
    CNES_1950_EPOCH,
    JAVA_EPOCH,
    GPS_EPOCH,
    utc_to_tai_seconds,
)
from orbis.domain.transforms import (
    PVCoordinates,
    Transform,
)
from orbis.domain.frames import (
    Frame,
    FrameTree,
    get_transform_to,
    gmst_rad,
)
from orbis.domain.body_shape import (
    GeodeticPoint,
    OneAxisEllipsoid,
)
from orbis.domain.topocentric import (
    Observation,
    TopocentricFrame,
)
from orbis.domain.orbits import (
    PositionAngle,
    OrbitType,
    OrbitalParameters,
    CartesianParameters,
    KeplerianParameters,
    EquinoctialParameters,
    CircularParameters,
    OrbitalState,
)
from orbis.domain.spacecraft_state import (
    Attitude,
    SpacecraftState,
)
from orbis.domain.ephemeris import (
    SunEphemeris,
    MoonEphemeris,
)
from orbis.domain.solar_activity import (
    SolarActivity,
    ActivityRecord,
    TabulatedSolarActivity,
    ConstantSolarActivity,
    ActivityIndex,
)
from orbis.domain.atmosphere import (
    AtmosphereModel,
    ExponentialAtmosphere,
    SolarActivityAtmosphere,
    atmospheric_density,
)
from orbis.domain.switching import (
    SwitchingFunction,
    SwitchingConfig,
    SwitchingEvent,
    DateSwitch,
    locate_root,
)
from orbis.domain.eclipse import (
    EclipseType,
    eclipse_ratio,
    eclipse_type,
    UmbraSwitch,
    PenumbraSwitch,
)
from orbis.domain.forces import (
    ForceModel,
    MassFlow,
    ZonalHarmonics,
    ThirdBodyAttraction,
    AtmosphericDrag,
    ShadowModel,
    SolarRadiationPressure,
    ConstantThrustManeuver,
)
from orbis.domain.integration import (
    AdaptiveStepConfig,
    EventDetector,
    IntegrationResult,
    Integrator,
    DormandPrinceIntegrator,
    ClassicalRungeKuttaIntegrator,
)
from orbis.domain.propagation import (
    PropagatorStatus,
    Propagator,
)
from orbis.domain.analytical import (
    KeplerianPropagator,
    EcksteinHechlerPropagator,
)
from orbis.domain.numerical_propagation import NumericalPropagator
from orbis.domain.semianalytical import (
    SemiAnalyticalConfig,
    SemiAnalyticalPropagator,
)

__all__ = [
    "OrbisError",
    "ConfigurationError",
    "FrameGraphError",
    "Precondition",
    "PropagationError",
    "DateOutOfRangeError",
    "ConvergenceError",
    "OrbitalConstants",
    "KeplerSolverConfig",
    "normalize_angle",
    "true_to_eccentric",
    "eccentric_to_true",
    "eccentric_to_mean",
    "mean_to_eccentric",
    "keplerian_mean_motion",
    "j2_raan_rate",
    "j2_arg_perigee_rate",
    "AbsoluteDate",
    "J2000_EPOCH",
    "JULIAN_EPOCH",
    "MODIFIED_JULIAN_EPOCH",
    "CNES_1950_EPOCH",
    "JAVA_EPOCH",
    "GPS_EPOCH",
    "utc_to_tai_seconds",
    "PVCoordinates",
    "Transform",
    "Frame",
    "FrameTree",
    "get_transform_to",
    "gmst_rad",
    "GeodeticPoint",
    "OneAxisEllipsoid",
    "Observation",
    "TopocentricFrame",
    "PositionAngle",
    "OrbitType",
    "OrbitalParameters",
    "CartesianParameters",
    "KeplerianParameters",
    "EquinoctialParameters",
    "CircularParameters",
    "OrbitalState",
    "Attitude",
    "SpacecraftState",
    "SunEphemeris",
    "MoonEphemeris",
    "SolarActivity",
    "ActivityRecord",
    "TabulatedSolarActivity",
    "ConstantSolarActivity",
    "ActivityIndex",
    "AtmosphereModel",
    "ExponentialAtmosphere",
    "SolarActivityAtmosphere",
    "atmospheric_density",
    "SwitchingFunction",
    "SwitchingConfig",
    "SwitchingEvent",
    "DateSwitch",
    "locate_root",
    "EclipseType",
    "eclipse_ratio",
    "eclipse_type",
    "UmbraSwitch",
    "PenumbraSwitch",
    "ForceModel",
    "MassFlow",
    "ZonalHarmonics",
    "ThirdBodyAttraction",
    "AtmosphericDrag",
    "ShadowModel",
    "SolarRadiationPressure",
    "ConstantThrustManeuver",
    "AdaptiveStepConfig",
    "EventDetector",
    "IntegrationResult",
    "Integrator",
    "DormandPrinceIntegrator",
    "ClassicalRungeKuttaIntegrator",
    "PropagatorStatus",
    "Propagator",
    "KeplerianPropagator",
    "EcksteinHechlerPropagator",
    "NumericalPropagator",
    "SemiAnalyticalConfig",
    "SemiAnalyticalPropagator",
]
