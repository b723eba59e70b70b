"""
ColonExpressionAnalysis - end-to-end tumor vs normal comparison.

Loads a dataset, runs per-gene t-tests with FWER and FDR corrections,
counts rejections, compares within-group gene correlation and writes
tables and figures.
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Optional

import numpy as np

from colonarray.analysis.correlation import (
    correlation_difference,
    group_correlation,
    top_differential_pairs,
)
from colonarray.analysis.multiple_testing import MultiTestCorrector, MultiTestResult
from colonarray.config import AnalysisConfig
from colonarray.io.hdf5 import save_results_hdf5
from colonarray.io.loaders import load_microarray

logger = logging.getLogger(__name__)


class ColonExpressionAnalysis:
    """
    Orchestrates a full analysis run.

    Parameters
    ----------
    config : AnalysisConfig
        Analysis configuration.

    Example
    -------
    >>> config = AnalysisConfig(data_path="alon1999.h5", output_dir="./output")
    >>> results = ColonExpressionAnalysis(config).run()
    >>> results["rejections"]
    {'raw': 627, 'fwer': ..., 'fdr': ...}
    """

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self.corrector = MultiTestCorrector(
            equal_var=config.equal_var,
            reference_group=config.reference_group,
        )

    def load(self) -> dict[str, Any]:
        if self.config.data_path is None:
            raise ValueError("No data_path configured and no dataset given")
        return load_microarray(
            self.config.data_path,
            expression_key=self.config.expression_key,
            status_key=self.config.status_key,
        )

    def run(self, data: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Run the analysis.

        Parameters
        ----------
        data : dict, optional
            Dataset dict with 'expression', 'status' and optionally
            'gene_names'. Loaded from ``config.data_path`` if None.

        Returns
        -------
        dict
            - 'tests': MultiTestResult
            - 'rejections': rejection counts at alpha for raw/fwer/fdr
            - 'top_pairs': DataFrame of differential gene pairs (or None)
            - 'correlation': dict with group correlation matrices (or None)
        """
        cfg = self.config
        if data is None:
            data = self.load()

        expression = np.asarray(data["expression"], dtype=np.float64)
        status = np.asarray(data["status"])
        gene_names = data.get("gene_names")

        tests = self.corrector.run(
            expression,
            status,
            fwer_method=cfg.fwer_method,
            fdr_method=cfg.fdr_method,
            alpha=cfg.alpha,
            feature_names=gene_names,
        )
        rejections = tests.rejection_counts()
        logger.info(
            f"Rejections at {cfg.alpha:.2f}: raw={rejections['raw']}, "
            f"{tests.fwer_method}={rejections['fwer']}, {tests.fdr_method}={rejections['fdr']}"
        )

        correlation = None
        top_pairs = None
        if cfg.n_top_pairs > 0:
            correlation, top_pairs = self._compare_correlation(expression, tests)

        results = {
            "tests": tests,
            "rejections": rejections,
            "top_pairs": top_pairs,
            "correlation": correlation,
        }

        if cfg.output_dir:
            self._save_results(results)

        return results

    def _compare_correlation(self, expression: np.ndarray, tests: MultiTestResult):
        partition = tests.partition
        logger.info(f"Computing {self.config.correlation_method} correlation within each group")

        corr_a = group_correlation(expression, partition.mask_a, self.config.correlation_method)
        corr_b = group_correlation(expression, partition.mask_b, self.config.correlation_method)
        diff = correlation_difference(corr_a, corr_b)

        top_pairs = top_differential_pairs(
            diff,
            n=self.config.n_top_pairs,
            gene_names=tests.feature_names,
            corr_a=corr_a,
            corr_b=corr_b,
        )
        top_pairs = top_pairs.rename(
            columns={
                "corr_a": f"corr_{partition.group_a}",
                "corr_b": f"corr_{partition.group_b}",
            }
        )

        correlation = {
            str(partition.group_a): corr_a,
            str(partition.group_b): corr_b,
            "difference": diff,
        }
        return correlation, top_pairs

    def _save_results(self, results: dict[str, Any]) -> None:
        output_path = Path(self.config.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        self.config.save(str(output_path / "config.json"))

        tests: MultiTestResult = results["tests"]
        tests.to_dataframe().to_csv(output_path / "pvalues.csv", index=False)

        save_results_hdf5(
            str(output_path / "pvalues.h5"),
            {
                "pvalue": tests.pvalues,
                f"pvalue_{tests.fwer_method}": tests.fwer_pvalues,
                f"pvalue_{tests.fdr_method}": tests.fdr_pvalues,
            },
            metadata={
                "alpha": tests.alpha,
                "fwer_method": tests.fwer_method,
                "fdr_method": tests.fdr_method,
                "group_a": str(tests.partition.group_a),
                "group_b": str(tests.partition.group_b),
                **{f"n_rejected_{k}": v for k, v in results["rejections"].items()},
            },
            gene_names=tests.feature_names,
        )

        if results["top_pairs"] is not None:
            results["top_pairs"].to_csv(output_path / "top_pairs.csv", index=False)

        if self.config.make_plots:
            self._save_plots(results, output_path)

        logger.info(f"Results saved to {output_path}")

    def _save_plots(self, results: dict[str, Any], output_path: Path) -> None:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from colonarray.visualization.plots import (
            plot_correlation_difference,
            plot_sorted_pvalues,
            save_figure,
        )

        tests: MultiTestResult = results["tests"]
        ax = plot_sorted_pvalues(tests.sorted_pvalues(), alpha=tests.alpha)
        save_figure(ax.figure, str(output_path / "sorted_pvalues.png"))
        plt.close(ax.figure)

        if results["correlation"] is not None:
            ax = plot_correlation_difference(results["correlation"]["difference"])
            save_figure(ax.figure, str(output_path / "correlation_difference.png"))
            plt.close(ax.figure)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Per-gene tumor vs normal t-tests with FWER/FDR correction",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--data", default=None, help="Dataset file (.h5, .hdf5, .csv, .tsv)")
    parser.add_argument("--config", default=None, help="JSON config file")
    parser.add_argument("--output-dir", default=None, help="Output directory")
    parser.add_argument("--alpha", type=float, default=None, help="Significance level (0.10)")
    parser.add_argument("--fwer-method", default=None, help="FWER correction (holm)")
    parser.add_argument("--fdr-method", default=None, help="FDR correction (BY)")
    parser.add_argument(
        "--equal-var", action="store_true", help="Pooled-variance t-test instead of Welch"
    )
    parser.add_argument("--reference-group", default=None, help="Label used as group A")
    parser.add_argument(
        "--top-pairs", type=int, default=None, help="Differential gene pairs to report (10)"
    )
    parser.add_argument("--no-plots", action="store_true", help="Do not write figures")
    return parser


def config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    """Build a config from a JSON file, overridden by command-line options."""
    config = AnalysisConfig.load(args.config) if args.config else AnalysisConfig()

    overrides = {
        "data_path": args.data,
        "output_dir": args.output_dir,
        "alpha": args.alpha,
        "fwer_method": args.fwer_method,
        "fdr_method": args.fdr_method,
        "reference_group": args.reference_group,
        "n_top_pairs": args.top_pairs,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    if args.equal_var:
        config.equal_var = True
    if args.no_plots:
        config.make_plots = False

    # Re-run validation and method parsing on the overridden values
    config.__post_init__()
    return config


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    config = config_from_args(args)
    if config.data_path is None:
        parser.error("a dataset is required: pass --data or set data_path in --config")

    results = ColonExpressionAnalysis(config).run()

    counts = results["rejections"]
    tests = results["tests"]
    print(f"Rejections at level {config.alpha:.2f}")
    print(f"  raw:               {counts['raw']}")
    print(f"  {tests.fwer_method + ' (FWER)':<18} {counts['fwer']}")
    print(f"  {tests.fdr_method + ' (FDR)':<18} {counts['fdr']}")
    if results["top_pairs"] is not None:
        print("\nLargest within-group correlation differences:")
        print(results["top_pairs"].to_string(index=False))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
