"""
Tests for the reduction diagnostics.
"""

import json

import numpy as np
import pytest
from center_metrics import (
    component_members,
    create_metrics,
    mass_deviation,
    partition_is_valid,
    row_sum_deviation,
)
from centering import get_center
from mixture_state import MixtureState


class TestInvariantChecks:
    """Tests for the invariant helpers."""

    def test_identity_is_partition(self):
        assert partition_is_valid(np.eye(4, dtype=int))

    def test_merged_rows_are_partition(self):
        assert partition_is_valid(np.array([[1, 0, 1], [0, 1, 0]]))

    @pytest.mark.parametrize(
        "groups",
        [
            np.array([[1, 1], [1, 0]]),
            np.array([[1, 0], [0, 0]]),
            np.array([[2, 0], [0, 1]]),
            np.array([1, 0, 0]),
        ],
    )
    def test_not_partition(self, groups):
        assert not partition_is_valid(groups)

    def test_component_members(self):
        groups = np.array([[1, 0, 0, 0], [0, 1, 1, 0], [0, 0, 0, 1]])
        assert component_members(groups) == [[0], [1, 2], [3]]

    def test_row_sum_deviation(self):
        z = np.array([[0.5, 0.5], [0.7, 0.2]])
        assert row_sum_deviation(z) == pytest.approx(0.1)
        assert row_sum_deviation(np.zeros((0, 2))) == 0.0

    def test_mass_deviation(self, worked_fit):
        before = MixtureState.from_fit(worked_fit)
        after = get_center(worked_fit, 1.0)
        assert mass_deviation(before, after) == pytest.approx(0.0, abs=1e-12)


class TestCreateMetrics:
    """Tests for the summary dictionary and its JSON file."""

    def test_summary(self, worked_fit):
        initial = MixtureState.from_fit(worked_fit)
        final = get_center(worked_fit, 0.4)
        metrics = create_metrics(initial, final, min_center=0.4)

        assert metrics["merges"] == 1
        assert metrics["ngroups_final"] == 4
        assert metrics["center"] == 2
        assert metrics["center_members"] == [2, 3]
        assert metrics["center_share"] == pytest.approx(0.4)
        assert metrics["partition_valid"]
        assert metrics["threshold_met"]

    def test_without_threshold(self, worked_fit):
        initial = MixtureState.from_fit(worked_fit)
        metrics = create_metrics(initial, initial)

        assert metrics["merges"] == 0
        assert "threshold_met" not in metrics

    def test_written_to_json(self, worked_fit, tmp_path):
        dataset_dir = tmp_path / "example_1"
        dataset_dir.mkdir()
        (dataset_dir / "metrics.json").write_text(
            json.dumps({"other": {"value": 1}}), encoding="utf-8"
        )

        initial = MixtureState.from_fit(worked_fit)
        final = get_center(worked_fit, 0.6)
        create_metrics(
            initial, final, data_name="example_1", min_center=0.6, data_dir=str(tmp_path)
        )

        saved = json.loads((dataset_dir / "metrics.json").read_text(encoding="utf-8"))
        assert saved["other"] == {"value": 1}
        assert saved["centering"]["merges"] == 2
        assert saved["centering"]["center_members"] == [1, 2, 3]

    def test_creates_missing_directory(self, worked_fit, tmp_path):
        state = MixtureState.from_fit(worked_fit)
        create_metrics(state, state, data_name="new_set", data_dir=str(tmp_path))
        assert (tmp_path / "new_set" / "metrics.json").exists()
