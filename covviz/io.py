import json
from pathlib import Path

import altair as alt
import pandas as pd
from natsort import natsorted

from .annotation import Annotation
from .process import GENOME_RESOLUTION, CoverageData, build_coverage_data, matrix_from_table


def find_runs(input_dir: Path) -> dict:
    """Discover all coverage runs in the input directory.

    Detects runs by finding all *coverage.tsv files and extracting the run
    name from each filename. Both dot-separated (e.g. run1.coverage.tsv) and
    run-together (e.g. run1coverage.tsv) naming conventions are supported.
    Companion files (*annotation.json, optional *references.tsv) are then
    located using the run name as a search key.

    Returns a dict mapping run name -> files dict, in natural sort order:
        {"run2": {"coverage": Path(...), "annotation": Path(...), "references": None}}
    """
    coverage_files = natsorted(input_dir.glob("*coverage.tsv"), key=lambda p: p.name)
    if not coverage_files:
        raise FileNotFoundError(f"No '*coverage.tsv' files found in {input_dir}")

    def find_one(*patterns):
        for pattern in patterns:
            matches = list(input_dir.glob(pattern))
            if len(matches) == 1:
                return matches[0]
            if len(matches) > 1:
                raise ValueError(
                    f"Multiple files match '{pattern}': "
                    + ", ".join(str(m) for m in matches)
                )
        raise FileNotFoundError(
            f"Could not find any of {patterns} in {input_dir}"
        )

    def find_optional(*patterns):
        for pattern in patterns:
            matches = list(input_dir.glob(pattern))
            if len(matches) == 1:
                return matches[0]
        return None

    runs = {}
    for coverage_path in coverage_files:
        run = coverage_path.name.removesuffix(".tsv").removesuffix("coverage").rstrip("._")
        if run in runs:
            raise ValueError(
                f"Multiple coverage files map to run '{run}': "
                f"{runs[run]['coverage'].name}, {coverage_path.name}"
            )
        runs[run] = {
            "coverage": coverage_path,
            "annotation": find_one(
                f"{run}annotation.json", f"{run}.annotation.json", f"{run}_annotation.json"
            ),
            # Optional per-reference hit counts; without them only read depth is drawn
            "references": find_optional(
                f"{run}references.tsv", f"{run}.references.tsv", f"{run}_references.tsv"
            ),
        }

    return runs


def load_annotation(path: Path) -> Annotation:
    """Load an annotation JSON file.

    Expected keys: ``genes`` (required, name -> {start, end, strand}),
    ``amplicons`` (optional list of [start, end]) and ``genome.length``
    (optional).
    """
    with open(path) as fh:
        raw = json.load(fh)
    return Annotation.from_dict(raw)


def load_run(files: dict, resolution: int = GENOME_RESOLUTION) -> CoverageData:
    """Load one run's coverage, optional reference hits and annotation."""
    cov_df = pd.read_csv(files["coverage"], sep="\t")
    samples, coverage = matrix_from_table(cov_df)

    references, hits = None, None
    if files.get("references") is not None:
        ref_df = pd.read_csv(files["references"], sep="\t")
        references, hits = matrix_from_table(ref_df)

    return build_coverage_data(
        coverage,
        load_annotation(files["annotation"]),
        samples=samples,
        hits=hits,
        references=references,
        resolution=resolution,
    )


def save_figure(chart: alt.Chart, path: Path):
    """Save an Altair chart. Format is inferred from the file extension.

    HTML is fully self-contained and interactive; JSON is the Vega-Lite spec.
    PNG and SVG require vl-convert-python to be installed.
    """
    chart.save(str(path))
    print(f"  Saved: {path.name}")


def save_excel(sheets: dict, path: Path):
    """Write a multi-sheet Excel workbook. Requires openpyxl.

    Args:
        sheets: Dict mapping sheet name -> DataFrame (insertion order preserved).
        path: Output path (.xlsx).
    """
    with pd.ExcelWriter(str(path), engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    print(f"  Saved: {path.name}")
