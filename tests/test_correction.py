"""Tests for multiple-comparison correction."""

import numpy as np
import pytest

from colonarray.errors import UnknownCorrectionMethodError
from colonarray.stats.correction import CorrectionMethod, adjust_pvalues, apply_correction

CONTROLLING_METHODS = ["bonferroni", "holm", "hochberg", "hommel", "BH", "BY"]


class TestCorrectionMethod:
    """Tests for CorrectionMethod.parse."""

    def test_member_passthrough(self):
        assert CorrectionMethod.parse(CorrectionMethod.HOLM) is CorrectionMethod.HOLM

    def test_case_insensitive(self):
        assert CorrectionMethod.parse("by") is CorrectionMethod.BY
        assert CorrectionMethod.parse("Holm") is CorrectionMethod.HOLM

    def test_fdr_alias(self):
        assert CorrectionMethod.parse("fdr") is CorrectionMethod.BH

    def test_none(self):
        assert CorrectionMethod.parse(None) is CorrectionMethod.NONE
        assert CorrectionMethod.parse("none") is CorrectionMethod.NONE

    def test_unknown(self):
        with pytest.raises(UnknownCorrectionMethodError, match="Unknown correction method"):
            CorrectionMethod.parse("sidak")

    def test_unknown_is_value_error(self):
        with pytest.raises(ValueError):
            CorrectionMethod.parse(42)


class TestAdjustPvalues:
    """Tests for adjust_pvalues against hand-computed references."""

    def test_none_is_identity(self):
        pvalues = np.array([0.2, 0.01, np.nan, 0.5])
        adjusted = adjust_pvalues(pvalues, "none")
        assert np.array_equal(adjusted, pvalues, equal_nan=True)
        assert adjusted is not pvalues

    def test_bonferroni(self):
        pvalues = np.array([0.01, 0.02, 0.03, 0.04, 0.05])
        adjusted = adjust_pvalues(pvalues, "bonferroni")
        assert np.allclose(adjusted, pvalues * len(pvalues))

    def test_bonferroni_capped(self):
        adjusted = adjust_pvalues(np.array([0.5, 0.8]), "bonferroni")
        assert np.all(adjusted <= 1.0)

    def test_holm(self):
        pvalues = np.array([0.01, 0.02, 0.03, 0.04, 0.05])
        adjusted = adjust_pvalues(pvalues, "holm")
        assert np.allclose(adjusted, [0.05, 0.08, 0.09, 0.09, 0.09])

    def test_holm_unsorted_with_nan(self):
        pvalues = np.array([0.04, np.nan, 0.01, 0.03])
        adjusted = adjust_pvalues(pvalues, "holm")

        assert np.isnan(adjusted[1])
        assert np.allclose(adjusted[[0, 2, 3]], [0.06, 0.03, 0.06])

    def test_hochberg(self):
        pvalues = np.array([0.01, 0.02, 0.03, 0.04, 0.05])
        adjusted = adjust_pvalues(pvalues, "hochberg")
        assert np.allclose(adjusted, 0.05)

    def test_hommel(self):
        pvalues = np.array([0.01, 0.02, 0.03, 0.04, 0.05])
        adjusted = adjust_pvalues(pvalues, "hommel")
        assert np.allclose(adjusted, 0.05)

    def test_hommel_two_tests_equals_hochberg(self):
        pvalues = np.array([0.03, 0.01])
        assert np.allclose(adjust_pvalues(pvalues, "hommel"), adjust_pvalues(pvalues, "hochberg"))

    def test_bh(self):
        pvalues = np.array([0.01, 0.02, 0.03, 0.04, 0.05])
        adjusted = adjust_pvalues(pvalues, "BH")
        assert np.allclose(adjusted, 0.05)

    def test_by(self):
        pvalues = np.array([0.01, 0.04, 0.03])
        adjusted = adjust_pvalues(pvalues, "BY")

        c_n = 1 + 1 / 2 + 1 / 3
        expected = [0.01 * 3 * c_n, 0.04 * c_n, 0.04 * c_n]
        assert np.allclose(adjusted, expected)

    def test_by_more_conservative_than_bh(self):
        pvalues = np.array([0.01, 0.02, 0.03])
        assert np.all(adjust_pvalues(pvalues, "BY") >= adjust_pvalues(pvalues, "BH"))

    def test_single_pvalue_unchanged(self):
        for method in CONTROLLING_METHODS:
            assert np.allclose(adjust_pvalues([0.03], method), [0.03])

    def test_empty_input(self):
        for method in CorrectionMethod:
            assert len(adjust_pvalues(np.array([]), method)) == 0

    def test_all_nan(self):
        adjusted = adjust_pvalues(np.array([np.nan, np.nan]), "holm")
        assert np.all(np.isnan(adjusted))

    def test_nan_excluded_from_count(self):
        with_nan = adjust_pvalues(np.array([0.01, np.nan, 0.02]), "bonferroni")
        without_nan = adjust_pvalues(np.array([0.01, 0.02]), "bonferroni")
        assert np.allclose(with_nan[[0, 2]], without_nan)

    def test_rejects_2d(self):
        with pytest.raises(ValueError, match="1-D"):
            adjust_pvalues(np.ones((2, 2)) * 0.5, "holm")


class TestCorrectionProperties:
    """Invariants that hold for every method on random p-values."""

    @pytest.fixture
    def pvalues(self):
        rng = np.random.default_rng(7)
        p = np.concatenate([rng.uniform(size=300), rng.uniform(0, 1e-3, size=50)])
        p[[5, 100, 200]] = np.nan
        return p

    @pytest.mark.parametrize("method", CONTROLLING_METHODS)
    def test_inflation_and_bounds(self, pvalues, method):
        adjusted = adjust_pvalues(pvalues, method)
        valid = ~np.isnan(pvalues)

        assert np.array_equal(np.isnan(adjusted), ~valid)
        assert np.all(adjusted[valid] >= pvalues[valid])
        assert np.all((adjusted[valid] >= 0) & (adjusted[valid] <= 1))

    @pytest.mark.parametrize("method", CONTROLLING_METHODS)
    def test_rank_order_preserved(self, pvalues, method):
        adjusted = adjust_pvalues(pvalues, method)
        valid = ~np.isnan(pvalues)

        order = np.argsort(pvalues[valid], kind="stable")
        sorted_adj = adjusted[valid][order]
        assert np.all(sorted_adj[1:] >= sorted_adj[:-1])

    def test_fwer_ordering(self, pvalues):
        """Holm is uniformly at least as powerful as Bonferroni; Hochberg and Hommel more so."""
        bonferroni = adjust_pvalues(pvalues, "bonferroni")
        holm = adjust_pvalues(pvalues, "holm")
        hochberg = adjust_pvalues(pvalues, "hochberg")
        hommel = adjust_pvalues(pvalues, "hommel")
        valid = ~np.isnan(pvalues)

        assert np.all(holm[valid] <= bonferroni[valid])
        assert np.all(hochberg[valid] <= holm[valid])
        assert np.all(hommel[valid] <= hochberg[valid] + 1e-12)


class TestApplyCorrection:
    """Tests for apply_correction."""

    def test_significance_count(self):
        pvalues = np.array([0.001, 0.01, 0.1, 0.5])
        result = apply_correction(pvalues, method="BH", alpha=0.05)

        expected_sig = np.sum(result["adjusted_pvalues"] <= 0.05)
        assert result["n_significant"] == expected_sig
        assert result["method"] == "BH"

    def test_threshold_inclusive(self):
        result = apply_correction(np.array([0.10]), method="none", alpha=0.10)
        assert result["n_significant"] == 1

    def test_nan_never_significant(self):
        result = apply_correction(np.array([np.nan, 0.001]), method="holm", alpha=0.05)
        assert not result["significant"][0]
        assert result["significant"][1]

    def test_none_significant(self):
        result = apply_correction(np.array([0.5, 0.6, 0.7]), method="BY", alpha=0.05)
        assert result["n_significant"] == 0

    def test_invalid_method(self):
        with pytest.raises(UnknownCorrectionMethodError):
            apply_correction(np.array([0.01, 0.02]), method="invalid")
