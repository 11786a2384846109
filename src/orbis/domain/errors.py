# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Error hierarchy for frame, orbit and propagation failures.

Three kinds are distinguished:

* ConfigurationError: malformed frame graph or invalid parameterization
  inputs. Fatal, not retried.
* PropagationError: a domain-validity precondition was violated (date
  outside a data window, frame not usable, orbit outside a closed-form
  model's regime). Recoverable by changing inputs.
* ConvergenceError: an iterative solver exhausted its iteration budget.

ConfigurationError also derives from ValueError and ConvergenceError from
ArithmeticError so callers catching the builtin families keep working.
"""
from enum import Enum


class OrbisError(Exception):
    """Base class for every error raised by orbis."""


class ConfigurationError(OrbisError, ValueError):
    """Invalid construction input (frames, orbital elements, options)."""


class FrameGraphError(ConfigurationError):
    """Frame graph is malformed: cycle, detached frame or foreign tree."""


class Precondition(Enum):
    """Precondition violated by a failed propagation."""
    DATE = "date"
    FRAME = "frame"
    ORBITAL_REGIME = "orbital_regime"


class PropagationError(OrbisError):
    """Propagation could not be performed for the given inputs.

    Attributes:
        precondition: Which precondition (date, frame, orbital regime)
            the inputs violated.
    """

    def __init__(self, message: str, precondition: Precondition) -> None:
        super().__init__(f"{message} [{precondition.value}]")
        self.precondition = precondition


class DateOutOfRangeError(PropagationError):
    """Date lies outside a data provider's inclusive validity window."""

    def __init__(self, date: object, min_date: object, max_date: object) -> None:
        super().__init__(
            f"date {date} outside validity window [{min_date}, {max_date}]",
            Precondition.DATE,
        )
        self.date = date
        self.min_date = min_date
        self.max_date = max_date


class ConvergenceError(OrbisError, ArithmeticError):
    """Iterative computation did not converge within its budget."""

    def __init__(self, message: str, iterations: int) -> None:
        super().__init__(f"{message} (after {iterations} iterations)")
        self.iterations = iterations
