#!/usr/bin/env python3
"""
Cross-validation script: colonarray vs R t.test / p.adjust.

Runs the per-gene Welch t-test with none / holm / BY adjustment in both
Python and R on the same dataset and compares the p-value vectors.

Usage:
    python validation/validate_against_r.py [--data alon1999.h5]

Requirements:
    - colonarray installed
    - R (Rscript on PATH), base packages only
"""

import argparse
import subprocess
import tempfile
from pathlib import Path

import numpy as np
import pandas as pd

from colonarray.analysis.multiple_testing import multiple_t_test
from colonarray.io.loaders import load_microarray
from colonarray.simulation import simulate_microarray

METHODS = ["none", "holm", "BY"]


def run_r_validation(data_file, output_file):
    """Run the R reference computation and return (stdout, stderr)."""
    r_code = f'''
    df <- read.csv("{data_file}", row.names=1, check.names=FALSE)
    status <- df$status
    A <- as.matrix(df[, colnames(df) != "status"])
    grp_a <- sort(unique(status))[1]

    pval <- sapply(seq_len(ncol(A)), function(i) {{
        x <- A[status == grp_a, i]
        y <- A[status != grp_a, i]
        tryCatch(t.test(x, y)$p.value, error = function(e) NA)
    }})

    out <- data.frame(
        none = pval,
        holm = p.adjust(pval, "holm"),
        BY = p.adjust(pval, "BY")
    )
    write.csv(out, "{output_file}", row.names=FALSE)
    cat("rejections:", sum(pval <= 0.10, na.rm=TRUE), "\\n")
    '''

    result = subprocess.run(["Rscript", "-e", r_code], capture_output=True, text=True)
    return result.stdout, result.stderr


def main():
    parser = argparse.ArgumentParser(description="Compare colonarray p-values with R")
    parser.add_argument("--data", default=None, help="Dataset file; simulated if omitted")
    parser.add_argument("--tol", type=float, default=1e-8, help="Absolute tolerance")
    args = parser.parse_args()

    print("=" * 60)
    print("colonarray vs R Validation")
    print("=" * 60)

    if args.data:
        data = load_microarray(args.data)
        print(f"\nLoaded data from: {args.data}")
    else:
        data = simulate_microarray(seed=0)
        print("\nUsing simulated data")
    expr, status = data["expression"], data["status"]
    print(f"  Expression matrix: {expr.shape[0]} samples x {expr.shape[1]} genes")

    print("\n--- Python (colonarray) ---")
    py = {m: multiple_t_test(expr, status, m) for m in METHODS}
    print(f"Raw rejections at 0.10: {int(np.sum(py['none'] <= 0.10))}")

    print("\n--- R ---")
    with tempfile.TemporaryDirectory() as tmpdir:
        data_file = Path(tmpdir) / "data.csv"
        output_file = Path(tmpdir) / "output.csv"

        df = pd.DataFrame(expr, columns=data["gene_names"])
        df.insert(0, "status", [str(s) for s in status])
        df.to_csv(data_file)

        stdout, stderr = run_r_validation(data_file, output_file)
        if stderr and "Error" in stderr:
            print(f"R Error: {stderr}")
            return 1
        print(stdout.strip())

        r = pd.read_csv(output_file)

    print("\n--- Validation Results ---")
    passed = True
    for m in METHODS:
        r_vals = r[m].values.astype(np.float64)
        same_nan = np.array_equal(np.isnan(py[m]), np.isnan(r_vals))
        diff = np.nanmax(np.abs(py[m] - r_vals)) if not np.all(np.isnan(r_vals)) else 0.0
        ok = same_nan and diff < args.tol
        passed &= ok
        print(f"{m:>5}: max |diff| = {diff:.3e}, NaN pattern match = {same_nan} "
              f"{'PASS' if ok else 'FAIL'}")

    print("\n" + "=" * 60)
    if passed:
        print("VALIDATION PASSED: Python matches R")
    else:
        print("VALIDATION FAILED: Results differ beyond tolerance")
    print("=" * 60)
    return 0 if passed else 1


if __name__ == "__main__":
    exit(main())
