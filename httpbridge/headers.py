"""
Header mapping helpers.

The scripting runtime cannot receive a map across the bridge, so headers
travel as a flat [key, value, key, value, ...] sequence and are rebuilt on
the other side.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple


def join_header_values(pairs: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Fold (name, value) pairs into one entry per header name.

    Names are matched case-insensitively; the first spelling seen is kept and
    repeated values are joined with ", " in the order they arrived.
    """
    spelling: Dict[str, str] = {}
    values: Dict[str, List[str]] = {}

    for name, value in pairs:
        key = name.lower()
        if key not in spelling:
            spelling[key] = name
            values[key] = []
        values[key].append(value)

    return {spelling[key]: ", ".join(values[key]) for key in spelling}


def interleave(headers: Dict[Optional[str], Optional[str]]) -> List[str]:
    """Flatten a header mapping into [k1, v1, k2, v2, ...]."""
    result = []
    for key, value in headers.items():
        if key is None or value is None:
            continue
        result.append(key)
        result.append(value)
    return result


def deinterleave(sequence: Sequence[str]) -> Dict[str, str]:
    """Rebuild a header mapping from an interleaved sequence."""
    headers = {}
    # a dangling key without a value is dropped
    for i in range(0, len(sequence) - 1, 2):
        headers[sequence[i]] = sequence[i + 1]
    return headers
