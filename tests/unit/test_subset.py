"""Unit tests for group subsetting."""

import pytest
import numpy as np

from popstruct_refinery.core.multires import Dataset, informative_sites, subset_group


class TestInformativeSites:
    """Tests for informative_sites."""

    def test_mask(self, small_matrix):
        """Sites are kept when some but not all samples are non-reference."""
        dataset = Dataset.from_binary(small_matrix)
        np.testing.assert_array_equal(
            informative_sites(dataset, [0, 1, 2, 3]),
            [True, True, False, False, True],
        )

    def test_mask_within_group(self, small_matrix):
        """Informativeness is judged within the group only."""
        dataset = Dataset.from_binary(small_matrix)
        np.testing.assert_array_equal(
            informative_sites(dataset, [0, 1]),
            [True, False, False, False, True],
        )

    def test_empty_group(self, small_matrix):
        """Empty groups are a programming error."""
        with pytest.raises(ValueError):
            informative_sites(Dataset.from_binary(small_matrix), [])


class TestSubsetGroup:
    """Tests for subset_group."""

    def test_reduced_dataset(self, small_matrix):
        """The reduced dataset holds the group and its informative sites."""
        dataset = Dataset.from_binary(small_matrix, sample_ids=["a", "b", "c", "d"])
        reduced = subset_group(dataset, [0, 1, 3])
        assert reduced.is_informative
        assert reduced.n_informative_sites == 3
        assert reduced.dataset.sample_ids == ("a", "b", "d")
        assert reduced.dataset.n_sites == 3
        assert reduced.dataset.prior.shape == (2, 3)
        assert reduced.dataset.hierarchy is None

    def test_one_site_is_uninformative(self):
        """A single varying site is not enough to re-cluster."""
        indicator = np.zeros((4, 6), dtype=np.int8)
        indicator[0, :2] = 1
        reduced = subset_group(Dataset.from_binary(indicator), np.arange(6))
        assert not reduced.is_informative
        assert reduced.dataset is None
        assert reduced.n_informative_sites == 1

    def test_constant_group_is_uninformative(self, structured_dataset):
        """Identical samples share no informative site."""
        reduced = subset_group(structured_dataset, np.arange(6))
        assert not reduced.is_informative
        assert reduced.n_informative_sites == 0
