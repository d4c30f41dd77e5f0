# Shared constants used across all figure modules.
# Order here controls color assignment: sample i / reference i gets entry i.

SAMPLE_PALETTE = [
    "#1170AA",  # darker blue
    "#FC7D0B",  # orange
    "#57606C",  # slate
    "#5FA2CE",  # light blue
    "#C85200",  # burnt orange
    "#7B848F",  # gray
    "#A3CCE9",  # pale blue
    "#FFBC79",  # peach
    "#C8D0D9",  # light gray
    "#006616",  # dark green
]

REFERENCE_PALETTE = [
    "#81B4C7",  # dusty blue
    "#ffcd3a",  # yellow
    "#6AA84F",  # med green
    "#D5A6BD",  # pink
    "#FF9A00",  # orange
    "#A4C2F4",  # periwinkle
    "#93C47D",  # light green
    "#B9DBF4",  # light blue
    "#ffc976",  # amber
    "#888888",  # med gray
    "#C8DBC8",  # sage
]

AMPLICON_FILL = "lightgray"
GENE_STROKE = "gray"
AXIS_COLOR = "black"

READ_DEPTH_TITLE = "Read Depth"
REFERENCE_MATCHES_TITLE = "Reference Matches"


def cycle(palette: list, n: int) -> list:
    """First *n* colors of *palette*, repeating it as needed."""
    if not palette:
        return []
    return (palette * (n // len(palette) + 1))[:n]
