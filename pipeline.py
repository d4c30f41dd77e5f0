"""Coverage Track Pipeline

Usage:
    python pipeline.py <input_dir> <output_dir> [--format html|png|svg|json] [--mode absolute|normalized|both] [--excel]

The input directory must contain, per run:
    *coverage.tsv       Read depth per bin, one column per sample
    *annotation.json    Genes ({name: {start, end, strand}}), optional amplicons
                        ([[start, end], ...]) and optional genome.length

Optional:
    *references.tsv     Reference-panel hit counts per bin, one column per
                        reference (column order = stacking order)

Outputs (saved to output_dir):
    {run}_read_depth            Step-line read depth per sample
    {run}_reference_matches     Normalized reference-match stream (if *references.tsv present)
    {run}_coverage.xlsx         Depth, stacked bands, amplicons and genes (if --excel is set)

PNG and SVG output require vl-convert-python (pip install vl-convert-python).
Excel output requires openpyxl (pip install openpyxl).
"""

import argparse
import sys
from pathlib import Path

import pandas as pd

from covviz import io, process
from covviz.annotation import GENE_LABEL_MAX_CHARS
from covviz.context import DisplayMode, build_context
from covviz.figures import coverage
from covviz.normalize import MIN_TOTAL_READS, ShapeMismatch, series_frame

_OUTPUT_NAMES = {
    DisplayMode.ABSOLUTE: "read_depth",
    DisplayMode.NORMALIZED: "reference_matches",
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Render read-depth and reference-match coverage tracks."
    )
    parser.add_argument(
        "input_dir",
        type=Path,
        help="Directory containing coverage TSV and annotation JSON files",
    )
    parser.add_argument(
        "output_dir",
        type=Path,
        help="Directory to write output figures",
    )
    parser.add_argument(
        "--format",
        choices=["html", "png", "svg", "json"],
        default="html",
        help="Output format for figures (default: html). "
             "PNG/SVG require vl-convert-python.",
    )
    parser.add_argument(
        "--mode",
        choices=["absolute", "normalized", "both"],
        default="both",
        help="Which view(s) to render (default: both). The normalized view "
             "is skipped for runs without a *references.tsv file.",
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=process.GENOME_RESOLUTION,
        metavar="BP",
        help=f"Genome bin width in base pairs (default: {process.GENOME_RESOLUTION}).",
    )
    parser.add_argument(
        "--min-reads",
        type=int,
        default=MIN_TOTAL_READS,
        metavar="N",
        help="Bins need more than N reads in total to be drawn in the "
             f"reference-match stream (default: {MIN_TOTAL_READS}).",
    )
    parser.add_argument(
        "--label-max-chars",
        type=int,
        default=GENE_LABEL_MAX_CHARS,
        metavar="N",
        help="Gene names longer than N characters are not labelled "
             f"(default: {GENE_LABEL_MAX_CHARS}).",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1000,
        metavar="PX",
        help="Chart container width in pixels (default: 1000).",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=300,
        metavar="PX",
        help="Chart container height in pixels, title included (default: 300).",
    )
    parser.add_argument(
        "--excel",
        action="store_true",
        default=False,
        help="Also write a multi-sheet Excel workbook ({run}_coverage.xlsx) "
             "with depth, stacked bands, amplicons and genes. Requires openpyxl.",
    )
    parser.add_argument(
        "--run-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Override the run name used in output filenames. "
             "Cannot be used when multiple runs are detected.",
    )
    return parser.parse_args(argv)


def _wanted_modes(mode: str) -> list:
    if mode == "both":
        return [DisplayMode.ABSOLUTE, DisplayMode.NORMALIZED]
    return [DisplayMode(mode)]


def main(argv=None):
    args = parse_args(argv)

    if not args.input_dir.is_dir():
        sys.exit(f"Error: input directory not found: {args.input_dir}")

    args.output_dir.mkdir(parents=True, exist_ok=True)
    fmt = args.format
    box = {"width": args.width, "height": args.height}

    # --- Discover runs ---
    print(f"Scanning for coverage runs in: {args.input_dir}")
    try:
        runs = io.find_runs(args.input_dir)
    except (FileNotFoundError, ValueError) as exc:
        sys.exit(f"Error: {exc}")
    print(f"  Found {len(runs)} run(s): {', '.join(runs)}")

    if args.run_name is not None:
        if len(runs) > 1:
            sys.exit(
                f"Error: --run-name cannot be used when multiple runs are detected "
                f"({', '.join(runs)})."
            )
        original = next(iter(runs))
        runs = {args.run_name: runs[original]}
        print(f"  Run name overridden: '{original}' -> '{args.run_name}'")

    # --- Process each run ---
    for run, files in runs.items():
        print(f"\n[{run}] Loading data...")
        try:
            data = io.load_run(files, resolution=args.resolution)
        except (ShapeMismatch, ValueError) as exc:
            sys.exit(f"Error: [{run}] {exc}")
        print(
            f"  {len(data.samples)} sample(s), {data.n_bins} bins, "
            f"{len(data.references or [])} reference(s)"
        )

        print(f"[{run}] Generating figures (format: {fmt})")
        context = None
        for mode in _wanted_modes(args.mode):
            if mode is DisplayMode.NORMALIZED and not data.has_reference_matches:
                print(f"[{run}] No references file found, skipping reference-match stream.")
                continue
            if context is None:
                context = build_context(
                    data, box, mode,
                    min_total_reads=args.min_reads,
                    label_max_chars=args.label_max_chars,
                )
            elif context.mode is not mode:
                context = context.toggle()
            io.save_figure(
                coverage.make_plot(context),
                args.output_dir / f"{run}_{_OUTPUT_NAMES[mode]}.{fmt}",
            )

        if args.excel:
            print(f"[{run}] Writing Excel workbook...")
            absolute = build_context(
                data, box, DisplayMode.ABSOLUTE,
                min_total_reads=args.min_reads,
                label_max_chars=args.label_max_chars,
            )
            sheets = {"depth": process.depth_frame(data)}
            if data.has_reference_matches:
                stream = absolute.toggle()
                sheets["reference_bands"] = series_frame(
                    stream.series, data.references, data.resolution
                )
            sheets["amplicons"] = pd.DataFrame(
                absolute.annotations.amplicons, columns=["index", "start", "end", "row"]
            )
            sheets["genes"] = pd.DataFrame(
                absolute.annotations.genes, columns=["name", "start", "end", "strand", "label"]
            )
            io.save_excel(sheets, args.output_dir / f"{run}_coverage.xlsx")

    print(f"\nDone. Figures saved to: {args.output_dir}")


if __name__ == "__main__":
    main()
