import json

import pytest

from covviz.annotation import Annotation
from covviz.process import build_coverage_data

BOX = {"width": 500, "height": 220}


@pytest.fixture
def box():
    return dict(BOX)


@pytest.fixture
def annotation():
    return Annotation(
        genes={
            "E1": {"start": 100, "end": 300, "strand": 1},
            "ORF1ab": {"start": 250, "end": 700, "strand": -1},
        },
        amplicons=((0, 200), (150, 400), (350, 600), (550, 800)),
        genome_length=1000,
    )


@pytest.fixture
def coverage_data(annotation):
    """Two samples, three references, ten 100-bp bins."""
    return build_coverage_data(
        coverage=[
            [0, 12, 30, 45, 60, 60, 44, 20, 8, 0],
            [5, 5, 10, 80, 120, 90, 40, 10, 0, 0],
        ],
        annotation=annotation,
        samples=["S1", "S2"],
        hits=[
            [0, 2, 10, 20, 30, 30, 20, 5, 1, 0],
            [0, 3, 10, 10, 0, 30, 20, 5, 1, 0],
            [0, 1, 10, 10, 30, 0, 20, 5, 1, 0],
        ],
        references=["A", "B", "C"],
        resolution=100,
    )


def write_run(directory, name="run1", references=True, amplicons=True):
    """Write a coverage run (TSV + JSON) the way the pipeline expects it."""
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{name}.coverage.tsv").write_text(
        "bin\tS1\tS2\n"
        "0\t0\t5\n"
        "1\t12\t5\n"
        "2\t30\t10\n"
        "3\t45\t80\n"
        "4\t60\t120\n"
    )
    if references:
        (directory / f"{name}.references.tsv").write_text(
            "bin\tA\tB\n"
            "0\t0\t0\n"
            "1\t5\t5\n"
            "2\t5\t15\n"
            "3\t20\t20\n"
            "4\t30\t10\n"
        )
    annotation = {
        "genome": {"length": 500},
        "genes": {"E1": {"start": 50, "end": 200, "strand": 1}},
    }
    if amplicons:
        annotation["amplicons"] = [[0, 150], [120, 300], [280, 480]]
    (directory / f"{name}.annotation.json").write_text(json.dumps(annotation))
    return directory


@pytest.fixture
def make_run():
    return write_run
