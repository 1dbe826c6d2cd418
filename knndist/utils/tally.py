# utils/tally.py
"""Vote counting over a fixed category universe."""

import numpy as np


def tally_codes(codes, n_categories):
    """Counts per category position; positions absent from ``codes`` count 0."""
    return np.bincount(np.asarray(codes, dtype=np.intp), minlength=n_categories)


def tally(responses, categories):
    """
    Count each category of ``categories`` among ``responses``.

    Every category of the universe appears in the result, in universe order,
    with 0 when it does not occur.
    """
    position = {category: i for i, category in enumerate(categories)}
    try:
        codes = [position[r] for r in np.asarray(responses).tolist()]
    except KeyError as e:
        raise ValueError(f"Response {e.args[0]!r} is not in the category universe") from None
    counts = tally_codes(codes, len(position))
    return {category: int(counts[i]) for category, i in position.items()}
