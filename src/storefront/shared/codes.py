"""Sequential human-readable codes (order numbers, SKUs, batch codes).

Each code is built from a prefix and a zero-padded sequence number. The
starting sequence is usually "existing count + 1"; when that code is taken
the next sequence is tried, a bounded number of times.
"""

from protean.exceptions import ValidationError


def next_free_code(build, is_taken, start, attempts, field="code"):
    """Return the first ``build(sequence)`` not reported as taken.

    Sequences ``start`` .. ``start + attempts - 1`` are tried in order.
    Raises ``ValidationError`` keyed by ``field`` when every candidate is
    taken, so callers never persist a duplicate.
    """
    for offset in range(attempts):
        candidate = build(start + offset)
        if not is_taken(candidate):
            return candidate

    raise ValidationError({field: [f"Could not generate a unique {field.replace('_', ' ')}"]})
