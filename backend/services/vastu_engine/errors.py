"""Exceptions raised at the boundaries that accept external layout input."""


class LayoutInputError(ValueError):
    """Malformed external input: footprint, room requests, snapshots or candidates.

    Geometry and scoring functions never raise this for well-formed numeric
    input; only the functions that accept data from outside the engine do.
    """
