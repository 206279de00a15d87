"""Unit tests for label reconciliation."""

import pytest
import numpy as np

from popstruct_refinery.core.multires import (
    GroupOutcome,
    GroupStatus,
    check_sub_labels,
    compact_labels,
    encode_raw_codes,
    is_refinement,
    reconcile,
)
from popstruct_refinery.core.multires.labels import group_offset


def _refined(index, members, sub_labels):
    return GroupOutcome(
        group_index=index,
        members=np.asarray(members),
        status=GroupStatus.REFINED,
        sub_labels=np.asarray(sub_labels),
    )


def _unsplit(index, members, status=GroupStatus.BYPASSED):
    return GroupOutcome(group_index=index, members=np.asarray(members), status=status)


class TestCheckSubLabels:
    """Tests for check_sub_labels."""

    def test_valid(self):
        """Valid labels are returned as int64."""
        labels = check_sub_labels([1, 2, 2, 1], 4)
        assert labels.dtype == np.int64
        np.testing.assert_array_equal(labels, [1, 2, 2, 1])

    def test_integral_floats_accepted(self):
        """Whole-number floats are converted."""
        np.testing.assert_array_equal(check_sub_labels(np.array([1.0, 3.0, 2.0]), 3), [1, 3, 2])

    @pytest.mark.parametrize("labels", [
        [1, 2, 3],
        [[1, 2], [1, 2]],
        [0, 1, 1, 2],
        [1, 2, 5, 1],
        [1.5, 1, 1, 1],
        ["a", "b", "a", "b"],
    ])
    def test_invalid(self, labels):
        """Wrong length, shape, range or type raises ValueError."""
        with pytest.raises(ValueError):
            check_sub_labels(labels, 4)


class TestEncodeRawCodes:
    """Tests for encode_raw_codes."""

    def test_offsets(self):
        """Group p owns codes starting at 2*n*p."""
        assert group_offset(1, 10) == 20
        assert group_offset(3, 10) == 60

    def test_codes(self):
        """Refined groups add their sub-labels; unsplit groups use the offset."""
        outcomes = [
            _refined(1, [0, 2, 4], [2, 1, 2]),
            _unsplit(2, [1, 3]),
            _unsplit(3, [5], GroupStatus.UNINFORMATIVE),
        ]
        raw = encode_raw_codes(outcomes, 6)
        np.testing.assert_array_equal(raw, [14, 24, 13, 24, 14, 36])
        assert raw.dtype == np.int64

    def test_no_collisions_at_maximum_sub_label(self):
        """The largest sub-label of one group stays below the next offset."""
        outcomes = [_refined(1, [0, 1], [2, 1]), _refined(2, [2, 3], [1, 2])]
        raw = encode_raw_codes(outcomes, 4)
        assert np.unique(raw).size == 4

    def test_missing_sample(self):
        """Uncovered samples are an internal error."""
        with pytest.raises(RuntimeError):
            encode_raw_codes([_unsplit(1, [0, 1])], 3)

    def test_overlapping_groups(self):
        """Samples in two groups are an internal error."""
        with pytest.raises(RuntimeError):
            encode_raw_codes([_unsplit(1, [0, 1]), _unsplit(2, [1, 2])], 3)


class TestCompaction:
    """Tests for compact_labels and reconcile."""

    def test_dense_order_preserving(self):
        """Distinct codes map to 1..k in ascending order."""
        np.testing.assert_array_equal(
            compact_labels(np.array([60, 21, 22, 60, 21])),
            [3, 1, 2, 3, 1],
        )

    def test_reconcile(self):
        """Sub-labels of earlier groups come first."""
        outcomes = [
            _refined(1, [0, 1, 4], [2, 1, 2]),
            _unsplit(2, [2, 3]),
        ]
        np.testing.assert_array_equal(reconcile(outcomes, 5), [2, 1, 3, 3, 2])


class TestIsRefinement:
    """Tests for is_refinement."""

    def test_refinement(self):
        """Splitting coarse groups is a refinement."""
        assert is_refinement(np.array([1, 1, 2, 2]), np.array([1, 2, 3, 3]))

    def test_not_refinement(self):
        """A fine label spanning two coarse groups is not."""
        assert not is_refinement(np.array([1, 1, 2, 2]), np.array([1, 2, 2, 3]))
