# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the ODE integrators and their event handling."""

import math

import numpy as np
import pytest

from orbis.domain.errors import ConfigurationError, ConvergenceError
from orbis.domain.integration import (
    DORMAND_PRINCE_A,
    DORMAND_PRINCE_B4,
    DORMAND_PRINCE_B5,
    DORMAND_PRINCE_C,
    AdaptiveStepConfig,
    ClassicalRungeKuttaIntegrator,
    DormandPrinceIntegrator,
    EventDetector,
    Integrator,
    _EventDrivenIntegrator,
)
from orbis.domain.switching import SwitchingConfig


# --- Fixtures ---

UNIT_SCALE = AdaptiveStepConfig(h_init=0.01, h_min=1e-8, h_max=1.0)


def exponential(t, y):
    return y


def harmonic(t, y):
    return np.array([y[1], -y[0]])


class RecordingDetector:
    """Event on the first state component crossing a level."""

    def __init__(self, level=0.0, component=0):
        self.level = level
        self.component = component
        self.calls = []

    def g(self, t, y):
        return y[self.component] - self.level

    def event_occurred(self, t, y, increasing):
        self.calls.append((t, np.array(y), increasing))


class Toggle:
    """Switches a derivative sign when time crosses a trigger."""

    def __init__(self, trigger):
        self.trigger = trigger
        self.after = False

    def g(self, t, y):
        return t - self.trigger

    def event_occurred(self, t, y, increasing):
        self.after = increasing

    def derivative(self, t, y):
        return np.array([-1.0 if self.after else 1.0])


@pytest.fixture
def dp():
    return DormandPrinceIntegrator(UNIT_SCALE)


# --- Butcher tableau ---

class TestButcherTableau:

    def test_row_sums_equal_c_nodes(self):
        """Sum of each row of A matrix should equal c_i."""
        for i, row in enumerate(DORMAND_PRINCE_A):
            row_sum = sum(row) if row else 0.0
            assert abs(row_sum - DORMAND_PRINCE_C[i]) < 1e-15, (
                f"Row {i}: sum(a)={row_sum} != c={DORMAND_PRINCE_C[i]}"
            )

    def test_weights_sum_to_one(self):
        assert abs(sum(DORMAND_PRINCE_B4) - 1.0) < 1e-15
        assert abs(sum(DORMAND_PRINCE_B5) - 1.0) < 1e-15

    def test_fsal_b5_equals_last_a_row(self):
        """FSAL property: 5th-order weights equal the last row of A."""
        for b, a in zip(DORMAND_PRINCE_B5, DORMAND_PRINCE_A[-1]):
            assert abs(b - a) < 1e-15


# --- Config ---

class TestConfigDefaults:

    def test_default_config_values(self):
        config = AdaptiveStepConfig()
        assert config.rtol == 1e-10
        assert config.atol == 1e-12
        assert config.h_init == 60.0
        assert config.h_min == 0.1
        assert config.h_max == 600.0
        assert config.safety_factor == 0.9
        assert config.max_steps == 1_000_000

    def test_config_is_frozen(self):
        config = AdaptiveStepConfig()
        with pytest.raises(AttributeError):
            config.rtol = 0.5  # type: ignore[misc]

    def test_integrators_satisfy_port(self, dp):
        assert isinstance(dp, Integrator)
        assert isinstance(ClassicalRungeKuttaIntegrator(), Integrator)
        assert isinstance(RecordingDetector(), EventDetector)


# --- Accuracy ---

class TestDormandPrince:

    def test_exponential_growth(self, dp):
        result = dp.integrate(exponential, 0.0, np.array([1.0]), 1.0)
        assert result.t == pytest.approx(1.0)
        assert result.y[0] == pytest.approx(math.e, rel=1e-9)

    def test_harmonic_oscillator_ten_periods(self, dp):
        t_end = 20.0 * math.pi
        result = dp.integrate(harmonic, 0.0, np.array([0.0, 1.0]), t_end)
        assert result.y[0] == pytest.approx(0.0, abs=1e-6)
        assert result.y[1] == pytest.approx(1.0, abs=1e-6)

    def test_backward_integration(self, dp):
        result = dp.integrate(exponential, 0.0, np.array([1.0]), -1.0)
        assert result.t == pytest.approx(-1.0)
        assert result.y[0] == pytest.approx(math.exp(-1.0), rel=1e-9)

    def test_statistics(self, dp):
        result = dp.integrate(harmonic, 0.0, np.array([0.0, 1.0]), 5.0)
        assert result.accepted_steps > 0
        assert result.evaluations >= 6 * result.accepted_steps
        assert result.events == ()

    def test_tighter_tolerance_more_accurate(self):
        loose = DormandPrinceIntegrator(AdaptiveStepConfig(rtol=1e-6, atol=1e-8, h_init=0.01, h_min=1e-8, h_max=1.0))
        tight = DormandPrinceIntegrator(AdaptiveStepConfig(rtol=1e-11, atol=1e-13, h_init=0.01, h_min=1e-8, h_max=1.0))
        y0 = np.array([0.0, 1.0])
        t_end = 10.0
        err_loose = abs(loose.integrate(harmonic, 0.0, y0, t_end).y[0] - math.sin(t_end))
        err_tight = abs(tight.integrate(harmonic, 0.0, y0, t_end).y[0] - math.sin(t_end))
        assert err_tight < err_loose

    def test_step_underflow(self):
        stiff = DormandPrinceIntegrator(AdaptiveStepConfig(h_init=60.0, h_min=0.1))
        with pytest.raises(ConvergenceError):
            stiff.integrate(lambda t, y: -1.0e9 * y, 0.0, np.array([1.0]), 100.0)

    def test_step_budget(self):
        limited = DormandPrinceIntegrator(AdaptiveStepConfig(h_init=0.01, h_min=1e-8, h_max=0.01, max_steps=3))
        with pytest.raises(ConvergenceError):
            limited.integrate(exponential, 0.0, np.array([1.0]), 1.0)


class TestClassicalRungeKutta:

    def test_exponential_growth(self):
        rk4 = ClassicalRungeKuttaIntegrator(step=0.01)
        result = rk4.integrate(exponential, 0.0, np.array([1.0]), 1.0)
        assert result.y[0] == pytest.approx(math.e, rel=1e-8)
        assert result.accepted_steps == pytest.approx(100, abs=1)
        assert result.rejected_steps == 0

    def test_last_step_shortened(self):
        rk4 = ClassicalRungeKuttaIntegrator(step=0.3)
        result = rk4.integrate(exponential, 0.0, np.array([1.0]), 1.0)
        assert result.t == pytest.approx(1.0)

    @pytest.mark.parametrize("step", [0.0, -10.0])
    def test_invalid_step(self, step):
        with pytest.raises(ConfigurationError):
            ClassicalRungeKuttaIntegrator(step=step)

    def test_step_loop_requires_stepper(self):
        """The shared driver cannot run without a first-step rule and a stepper."""
        class NoStepper(_EventDrivenIntegrator):
            def _first_step(self, span):
                return span

        with pytest.raises(TypeError):
            NoStepper()


# --- Events ---

class TestEvents:

    def test_event_located(self, dp):
        detector = RecordingDetector()
        result = dp.integrate(harmonic, 0.0, np.array([0.0, 1.0]), 4.0, [detector])
        assert len(result.events) == 1
        event = result.events[0]
        assert event.t == pytest.approx(math.pi, abs=2e-6)
        assert event.increasing is False
        assert event.detector is detector
        assert len(detector.calls) == 1

    def test_state_at_event_on_trajectory(self, dp):
        detector = RecordingDetector()
        dp.integrate(harmonic, 0.0, np.array([0.0, 1.0]), 4.0, [detector])
        t_event, y_event, _ = detector.calls[0]
        assert y_event[0] == pytest.approx(math.sin(t_event), abs=1e-9)
        assert y_event[1] == pytest.approx(math.cos(t_event), abs=1e-9)

    def test_event_threshold_respected(self):
        integrator = DormandPrinceIntegrator(UNIT_SCALE, SwitchingConfig(threshold_s=1e-10))
        result = integrator.integrate(harmonic, 0.0, np.array([0.0, 1.0]), 4.0, [RecordingDetector()])
        assert result.events[0].t == pytest.approx(math.pi, abs=1e-7)

    def test_events_in_chronological_order(self, dp):
        first = RecordingDetector(level=0.5)
        second = RecordingDetector(level=-0.5)
        result = dp.integrate(harmonic, 0.0, np.array([0.0, 1.0]), 6.0, [second, first])
        times = [event.t for event in result.events]
        assert times == sorted(times)
        assert result.events[0].detector is first
        assert result.events[0].t == pytest.approx(math.pi / 6.0, abs=2e-6)

    def test_discontinuous_derivative(self, dp):
        """The step never straddles the switch: y climbs to 1.5 then descends."""
        toggle = Toggle(1.5)
        result = dp.integrate(toggle.derivative, 0.0, np.array([0.0]), 3.0, [toggle])
        assert toggle.after
        assert result.y[0] == pytest.approx(0.0, abs=1e-5)

    def test_backward_event(self, dp):
        toggle = Toggle(-1.0)
        result = dp.integrate(toggle.derivative, 0.0, np.array([0.0]), -2.0, [toggle])
        assert len(result.events) == 1
        assert result.events[0].increasing is False
        assert result.events[0].t == pytest.approx(-1.0, abs=2e-6)

    def test_rk4_events(self):
        rk4 = ClassicalRungeKuttaIntegrator(step=0.05)
        toggle = Toggle(0.73)
        result = rk4.integrate(toggle.derivative, 0.0, np.array([0.0]), 1.0, [toggle])
        assert result.events[0].t == pytest.approx(0.73, abs=2e-6)
        assert result.y[0] == pytest.approx(0.73 - 0.27, abs=1e-5)
