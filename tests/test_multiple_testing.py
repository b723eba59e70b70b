"""Tests for per-gene testing with multiple-comparison correction."""

import os

import numpy as np
import pytest
from scipy import stats

from colonarray.analysis.multiple_testing import (
    GroupPartition,
    MultiTestCorrector,
    multiple_t_test,
)
from colonarray.errors import (
    InvalidGroupCountError,
    ShapeMismatchError,
    UnknownCorrectionMethodError,
)
from colonarray.simulation import simulate_microarray


@pytest.fixture
def small_data():
    rng = np.random.default_rng(11)
    matrix = rng.normal(size=(20, 30))
    matrix[:10, :5] += 3.0
    labels = np.array(["tumor"] * 10 + ["normal"] * 10)
    return matrix, labels


@pytest.fixture(scope="module")
def simulated():
    return simulate_microarray(
        n_tumor=40,
        n_normal=22,
        n_genes=2000,
        n_differential=600,
        effect_range=(0.3, 2.0),
        seed=0,
    )


class TestGroupPartition:
    """Tests for GroupPartition.from_labels."""

    def test_default_sorted_order(self):
        partition = GroupPartition.from_labels(["tumor", "normal", "tumor"])
        assert partition.group_a == "normal"
        assert partition.group_b == "tumor"
        assert partition.mask_a.tolist() == [False, True, False]

    def test_reference_group(self):
        partition = GroupPartition.from_labels(["tumor", "normal", "tumor"], "tumor")
        assert partition.group_a == "tumor"
        assert partition.n_a == 2
        assert partition.n_b == 1

    def test_numeric_labels(self):
        partition = GroupPartition.from_labels([2, 1, 2, 1])
        assert partition.group_a == 1

    def test_unknown_reference_group(self):
        with pytest.raises(ValueError, match="not found"):
            GroupPartition.from_labels(["a", "b"], "c")

    def test_one_group(self):
        with pytest.raises(InvalidGroupCountError):
            GroupPartition.from_labels(["a", "a", "a"])


class TestMultiTestCorrector:
    """Tests for MultiTestCorrector.compute."""

    def test_shape_preservation(self, small_data):
        matrix, labels = small_data
        for method in ("none", "holm", "BY"):
            assert len(MultiTestCorrector().compute(matrix, labels, method)) == matrix.shape[1]

    def test_identity_correction(self, small_data):
        matrix, labels = small_data
        corrector = MultiTestCorrector()

        raw = corrector.compute(matrix, labels, "none")
        ref = stats.ttest_ind(matrix[labels == "normal"], matrix[labels == "tumor"], axis=0,
                              equal_var=False)
        assert np.allclose(raw, ref.pvalue)
        assert np.array_equal(raw, corrector.raw_pvalues(matrix, labels))

    def test_column_order_preserved(self, small_data):
        matrix, labels = small_data
        corrector = MultiTestCorrector()

        perm = np.random.default_rng(0).permutation(matrix.shape[1])
        holm = corrector.compute(matrix, labels, "holm")
        holm_perm = corrector.compute(matrix[:, perm], labels, "holm")
        assert np.allclose(holm_perm, holm[perm])

    def test_reference_group_does_not_change_pvalues(self, small_data):
        matrix, labels = small_data
        p_default = MultiTestCorrector().compute(matrix, labels, "BY")
        p_tumor = MultiTestCorrector(reference_group="tumor").compute(matrix, labels, "BY")
        assert np.allclose(p_default, p_tumor)

    def test_monotonic_inflation_and_bounds(self, small_data):
        matrix, labels = small_data
        corrector = MultiTestCorrector()
        raw = corrector.compute(matrix, labels, "none")

        for method in ("holm", "BY"):
            adjusted = corrector.compute(matrix, labels, method)
            assert np.all(adjusted >= raw)
            assert np.all((adjusted >= 0) & (adjusted <= 1))

    def test_holm_ordering(self, small_data):
        matrix, labels = small_data
        corrector = MultiTestCorrector()
        raw = corrector.compute(matrix, labels, "none")
        holm = corrector.compute(matrix, labels, "holm")

        sorted_holm = holm[np.argsort(raw)]
        assert np.all(np.diff(sorted_holm) >= 0)

    def test_shape_mismatch(self, small_data):
        matrix, labels = small_data
        with pytest.raises(ShapeMismatchError):
            MultiTestCorrector().compute(matrix, labels[:-1], "holm")

    def test_non_2d_matrix(self):
        with pytest.raises(ShapeMismatchError):
            MultiTestCorrector().compute(np.ones(5), ["a", "a", "b", "b", "b"], "none")

    def test_three_groups(self, small_data):
        matrix, _ = small_data
        labels = np.array(["tumor"] * 7 + ["normal"] * 7 + ["adenoma"] * 6)
        with pytest.raises(InvalidGroupCountError):
            MultiTestCorrector().compute(matrix, labels, "holm")

    def test_unknown_method(self, small_data):
        matrix, labels = small_data
        with pytest.raises(UnknownCorrectionMethodError):
            MultiTestCorrector().compute(matrix, labels, "storey")

    def test_unknown_method_checked_before_shapes(self, small_data):
        matrix, labels = small_data
        with pytest.raises(UnknownCorrectionMethodError):
            MultiTestCorrector().compute(matrix, labels[:-1], "storey")

    def test_degenerate_variance(self, small_data):
        matrix, labels = small_data
        matrix = matrix.copy()
        matrix[:, 3] = 4.2
        corrector = MultiTestCorrector()

        for method in ("none", "holm", "BY"):
            adjusted = corrector.compute(matrix, labels, method)
            assert np.isnan(adjusted[3])
            assert np.sum(np.isnan(adjusted)) == 1

    def test_equal_var_flag(self, small_data):
        matrix, labels = small_data
        raw = MultiTestCorrector(equal_var=True).compute(matrix, labels, "none")
        ref = stats.ttest_ind(matrix[labels == "normal"], matrix[labels == "tumor"], axis=0,
                              equal_var=True)
        assert np.allclose(raw, ref.pvalue)

    def test_functional_form(self, small_data):
        matrix, labels = small_data
        assert np.allclose(
            multiple_t_test(matrix, labels, "holm"),
            MultiTestCorrector().compute(matrix, labels, "holm"),
        )

    def test_pandas_input(self, small_data):
        pd = pytest.importorskip("pandas")
        matrix, labels = small_data
        df = pd.DataFrame(matrix)
        status = pd.Series(pd.Categorical(labels, categories=["tumor", "normal"]))

        assert np.allclose(
            MultiTestCorrector().compute(df, status, "BY"),
            MultiTestCorrector().compute(matrix, labels, "BY"),
        )


class TestMultiTestResult:
    """Tests for MultiTestCorrector.run and MultiTestResult."""

    def test_run_vectors(self, small_data):
        matrix, labels = small_data
        corrector = MultiTestCorrector()
        result = corrector.run(matrix, labels)

        assert result.n_features == matrix.shape[1]
        assert np.allclose(result.fwer_pvalues, corrector.compute(matrix, labels, "holm"))
        assert np.allclose(result.fdr_pvalues, corrector.compute(matrix, labels, "BY"))
        assert result.fwer_method == "holm"
        assert result.fdr_method == "BY"

    def test_default_feature_names(self, small_data):
        matrix, labels = small_data
        result = MultiTestCorrector().run(matrix, labels)
        assert result.feature_names[0] == "gene_1"

    def test_feature_name_mismatch(self, small_data):
        matrix, labels = small_data
        with pytest.raises(ShapeMismatchError):
            MultiTestCorrector().run(matrix, labels, feature_names=["a", "b"])

    def test_rejected_genes_are_differential(self, small_data):
        matrix, labels = small_data
        names = [f"g{i}" for i in range(matrix.shape[1])]
        result = MultiTestCorrector().run(matrix, labels, feature_names=names, alpha=0.001)

        rejected = result.get_rejected_genes("fwer")
        assert set(rejected) <= {"g0", "g1", "g2", "g3", "g4"}
        assert len(rejected) == result.n_rejected("fwer")

    def test_unknown_set(self, small_data):
        matrix, labels = small_data
        result = MultiTestCorrector().run(matrix, labels)
        with pytest.raises(ValueError, match="Unknown p-value set"):
            result.n_rejected("bh")

    def test_to_dataframe(self, small_data):
        pytest.importorskip("pandas")
        matrix, labels = small_data
        df = MultiTestCorrector().run(matrix, labels).to_dataframe()

        assert list(df.columns) == ["gene", "pvalue", "pvalue_holm", "pvalue_BY"]
        assert len(df) == matrix.shape[1]

    def test_sorted_pvalues(self, small_data):
        matrix, labels = small_data
        curves = MultiTestCorrector().run(matrix, labels).sorted_pvalues()

        assert list(curves) == ["raw", "holm", "BY"]
        for values in curves.values():
            assert np.all(np.diff(values) >= 0)


class TestRejectionCounts:
    """Rejection-count ordering on 2000 simulated genes."""

    def test_holm_by_raw_ordering(self, simulated):
        result = MultiTestCorrector().run(simulated["expression"], simulated["status"])
        counts = result.rejection_counts(alpha=0.10)

        assert counts["fwer"] < counts["fdr"] < counts["raw"]

    def test_fwer_rejections_mostly_true(self, simulated):
        result = MultiTestCorrector().run(
            simulated["expression"],
            simulated["status"],
            feature_names=simulated["gene_names"],
        )
        rejected = np.where(result.rejected("fwer"))[0]
        true_hits = np.isin(rejected, simulated["differential"])
        assert true_hits.mean() > 0.95


ALON_DATA = os.environ.get("COLONARRAY_ALON_DATA")


@pytest.mark.skipif(
    not ALON_DATA or not os.path.exists(ALON_DATA),
    reason="Set COLONARRAY_ALON_DATA to the Alon et al. (1999) dataset file",
)
class TestAlonReference:
    """Reference rejection counts on the Alon et al. colon data."""

    def test_rejection_counts(self):
        from colonarray.io.loaders import load_microarray

        data = load_microarray(ALON_DATA)
        assert data["expression"].shape == (62, 2000)

        result = MultiTestCorrector().run(data["expression"], data["status"], alpha=0.10)
        counts = result.rejection_counts()

        assert counts["raw"] == 627
        assert counts["fwer"] < counts["fdr"] < counts["raw"]
