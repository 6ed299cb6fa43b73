"""Tests for simulation defaults and configuration."""

import pytest

from py_ossim.config import (
    DEFAULT_AGING_RATE,
    DEFAULT_CONTEXT_SWITCH,
    DEFAULT_QUANTUM,
    SimulationConfig,
)


class TestSimulationConfig:
    """Verify the scheduler configuration object."""

    def test_defaults(self) -> None:
        """A bare config should use the module defaults."""
        config = SimulationConfig()
        assert config.quantum == DEFAULT_QUANTUM
        assert config.aging_rate == DEFAULT_AGING_RATE
        assert config.context_switch == DEFAULT_CONTEXT_SWITCH

    def test_zero_quantum_rejected(self) -> None:
        """Round Robin needs at least one tick per slice."""
        with pytest.raises(ValueError, match="quantum"):
            SimulationConfig(quantum=0)

    def test_negative_aging_rejected(self) -> None:
        """Aging cannot lower priorities."""
        with pytest.raises(ValueError, match="aging_rate"):
            SimulationConfig(aging_rate=-1)

    def test_negative_context_switch_rejected(self) -> None:
        """Switch overhead cannot be negative."""
        with pytest.raises(ValueError, match="context_switch"):
            SimulationConfig(context_switch=-2)

    def test_with_overrides(self) -> None:
        """Overrides should replace only the given fields."""
        config = SimulationConfig().with_overrides(quantum=5)
        quantum = 5
        assert config.quantum == quantum
        assert config.aging_rate == DEFAULT_AGING_RATE

    def test_with_overrides_ignores_none(self) -> None:
        """A None override leaves the field unchanged."""
        config = SimulationConfig(quantum=2).with_overrides(quantum=None, aging_rate=3)
        quantum = 2
        aging = 3
        assert config.quantum == quantum
        assert config.aging_rate == aging

    def test_overrides_are_validated(self) -> None:
        """Overrides go through the same validation."""
        with pytest.raises(ValueError, match="quantum"):
            SimulationConfig().with_overrides(quantum=0)
