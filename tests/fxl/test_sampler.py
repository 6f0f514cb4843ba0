"""Tests for sampling programs over a range."""

import math

import pytest

from fxl import FXLSampler


@pytest.fixture
def sampler(fxl):
    """Create a sampler sharing the test's FXL instance."""
    return FXLSampler(fxl)


class TestSample:
    """Test sampled points."""

    def test_inclusive_range(self, fxl, sampler):
        """count intervals give count + 1 points, both ends included."""
        result = sampler.sample(fxl.compile("x^2"), 0.0, 1.0, 4)
        assert result.points == [(0.0, 0.0), (0.25, 0.0625), (0.5, 0.25), (0.75, 0.5625), (1.0, 1.0)]
        assert result.error is None
        assert result.elapsed >= 0.0

    def test_other_variables_bound(self, fxl, sampler):
        """Variables other than the swept one come from the bindings."""
        result = sampler.sample(fxl.compile("a*x + b"), -1.0, 1.0, 2, bindings={"a": 2.0, "b": 1.0})
        assert [y for _, y in result.points] == [-1.0, 1.0, 3.0]

    def test_unbound_variables_default_to_zero(self, fxl, sampler):
        """Variables without a binding read as 0."""
        result = sampler.sample(fxl.compile("x + b"), 0.0, 2.0, 2)
        assert [y for _, y in result.points] == [0.0, 1.0, 2.0]

    def test_custom_variable(self, fxl, sampler):
        """Any variable may be swept."""
        result = sampler.sample(fxl.compile("2t + x"), 0.0, 1.0, 1, variable="t", bindings={"x": 10.0})
        assert result.points == [(0.0, 10.0), (1.0, 12.0)]

    def test_constant_program(self, fxl, sampler):
        """A program without the swept variable gives a flat line."""
        result = sampler.sample(fxl.optimized_compile("2+3"), 0.0, 1.0, 3)
        assert [y for _, y in result.points] == [5.0] * 4

    def test_failing_points_are_nan(self, fxl, sampler):
        """Evaluation errors give nan points and keep the first message."""
        result = sampler.sample(fxl.compile("log(x)"), 1.0, 2.0, 2)
        assert len(result.points) == 3
        assert all(math.isnan(y) for _, y in result.points)
        assert result.error == "Function log expects 2 arguments, but 1 were given"

    def test_ieee_points_are_not_errors(self, fxl, sampler):
        """Domain errors give nan without an error message."""
        result = sampler.sample(fxl.compile("1/x"), 0.0, 1.0, 1)
        assert result.points[0] == (0.0, math.inf)
        assert result.error is None

    @pytest.mark.parametrize("count", [0, -1])
    def test_invalid_count(self, fxl, sampler, count):
        """At least one interval is needed."""
        with pytest.raises(ValueError):
            sampler.sample(fxl.compile("x"), 0.0, 1.0, count)

    def test_time_per_point(self, fxl, sampler):
        """Time per point is the average over the sample."""
        result = sampler.sample(fxl.compile("x"), 0.0, 1.0, 9)
        assert result.time_per_point() == pytest.approx(result.elapsed / 10)

    def test_build_values(self, fxl, sampler):
        """The swept variable's slot is reported."""
        program = fxl.compile("a + x")
        values, slot = sampler.build_values(program, "x", {"a": 4.0})
        assert values == [4.0, 0.0]
        assert slot == 1
        assert sampler.build_values(program, "t", {})[1] is None


class TestDerivedCurves:
    """Test derivative and integral curves."""

    def test_derivative(self):
        """Backward differences, one per interval."""
        points = [(0.0, 0.0), (1.0, 1.0), (2.0, 4.0)]
        assert FXLSampler.derivative(points) == [(1.0, 1.0), (2.0, 3.0)]

    def test_derivative_of_short_curves(self):
        """Fewer than two points have no derivative."""
        assert FXLSampler.derivative([]) == []
        assert FXLSampler.derivative([(0.0, 1.0)]) == []

    def test_integral(self):
        """Cumulative trapezoid rule."""
        points = [(0.0, 0.0), (1.0, 1.0), (2.0, 4.0)]
        assert FXLSampler.integral(points) == [(0.0, 0.0), (1.0, 0.5), (2.0, 3.0)]

    def test_integral_start_value(self):
        """The integral starts from the given value."""
        points = [(0.0, 2.0), (1.0, 2.0)]
        assert FXLSampler.integral(points, 10.0) == [(0.0, 10.0), (1.0, 12.0)]

    def test_integral_of_empty_curve(self):
        """No points, no integral."""
        assert FXLSampler.integral([]) == []

    def test_integral_of_sampled_curve(self, fxl, sampler):
        """The integral of x^2 over [0, 3] approaches 9."""
        result = sampler.sample(fxl.compile("x^2"), 0.0, 3.0, 3000)
        assert FXLSampler.integral(result.points)[-1][1] == pytest.approx(9.0, rel=1e-5)


class TestParameters:
    """Test parameter formula evaluation."""

    def test_evaluate_parameters(self, sampler):
        """Each parameter gets a value or an error."""
        results = sampler.evaluate_parameters({"a": "2", "k": "pi/4", "bad": "2+", "v": "x"})
        assert results["a"].value == 2.0
        assert results["k"].value == pytest.approx(math.pi / 4)
        assert results["k"].error is None
        assert results["bad"].value is None
        assert results["bad"].error == "Error: Expected expression at end"
        assert results["v"].error is not None
        assert "Undefined variable: x" in results["v"].error
        assert results["v"].formula == "x"
