"""Unit tests for condition utilities."""

from __future__ import annotations

import pytest

from argocd_register_operator.utils.conditions import (
    find_condition,
    set_available_condition,
    set_degraded_condition,
    set_progressing_condition,
    update_condition,
)


class TestConditions:
    """Test condition utilities."""

    def test_update_condition_new(self) -> None:
        """Test adding a new condition."""
        conditions = []
        result = update_condition(
            conditions, "Available", "True", "Reconciling", "Cluster is Registered", observed_generation=1
        )

        assert len(result) == 1
        assert result[0]["type"] == "Available"
        assert result[0]["status"] == "True"
        assert result[0]["reason"] == "Reconciling"
        assert result[0]["message"] == "Cluster is Registered"
        assert result[0]["observedGeneration"] == 1
        assert result[0]["lastTransitionTime"]

    def test_update_condition_status_change(self) -> None:
        """Test that a status change moves lastTransitionTime."""
        conditions = [
            {
                "type": "Degraded",
                "status": "False",
                "reason": "Registered",
                "message": "Old message",
                "lastTransitionTime": "2023-01-01T00:00:00Z",
            }
        ]

        result = update_condition(conditions, "Degraded", "True", "Registered", "New message", observed_generation=2)

        assert len(result) == 1
        assert result[0]["status"] == "True"
        assert result[0]["message"] == "New message"
        assert result[0]["observedGeneration"] == 2
        assert result[0]["lastTransitionTime"] != "2023-01-01T00:00:00Z"

    def test_update_condition_reason_change(self) -> None:
        """Test that a reason change moves lastTransitionTime."""
        conditions = [
            {
                "type": "Degraded",
                "status": "True",
                "reason": "Error",
                "message": "m",
                "lastTransitionTime": "2023-01-01T00:00:00Z",
            }
        ]

        result = update_condition(conditions, "Degraded", "True", "Finalizing", "m")

        assert result[0]["lastTransitionTime"] != "2023-01-01T00:00:00Z"

    def test_message_only_change_keeps_transition_time(self) -> None:
        """Test that changing only the message keeps lastTransitionTime."""
        conditions = [
            {
                "type": "Degraded",
                "status": "True",
                "reason": "Error",
                "message": "X",
                "lastTransitionTime": "2023-01-01T00:00:00Z",
            }
        ]

        result = update_condition(conditions, "Degraded", "True", "Error", "Y")

        assert len(result) == 1
        assert result[0]["message"] == "Y"
        assert result[0]["lastTransitionTime"] == "2023-01-01T00:00:00Z"

    def test_update_condition_idempotent(self) -> None:
        """Test that applying the same condition twice changes nothing."""
        conditions = []
        update_condition(conditions, "Available", "True", "Reconciling", "Cluster is Registered")
        first = dict(conditions[0])

        update_condition(conditions, "Available", "True", "Reconciling", "Cluster is Registered")

        assert len(conditions) == 1
        assert conditions[0] == first

    def test_keeps_observed_generation_when_not_given(self) -> None:
        conditions = [{"type": "Available", "status": "True", "reason": "r", "message": "m", "observedGeneration": 3}]

        update_condition(conditions, "Available", "False", "r", "m")

        assert conditions[0]["observedGeneration"] == 3

    def test_order_is_preserved(self) -> None:
        """Test that updates keep the position of existing entries."""
        conditions = []
        set_progressing_condition(conditions, "True", "Creating Register", "Preparing to Register Cluster with ArgoCD")
        set_degraded_condition(conditions, "True", "Error", "boom")
        set_available_condition(conditions, "False", "Error", "boom")

        set_progressing_condition(conditions, "False", "Registered", "Cluster is Registered")

        assert [c["type"] for c in conditions] == ["Progressing", "Degraded", "Available"]

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError):
            update_condition([], "Available", "Yes", "r", "m")


class TestConditionLookup:
    """Test condition lookup helpers."""

    def test_find_condition(self) -> None:
        conditions = [{"type": "Available", "status": "True"}, {"type": "Degraded", "status": "False"}]

        assert find_condition(conditions, "Degraded")["status"] == "False"
        assert find_condition(conditions, "Progressing") is None
