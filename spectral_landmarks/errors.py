# errors.py

import operator


class ContractViolation(ValueError):
    """
    Raised when a caller breaks a size or shape contract of the landmark core.

    Examples: a frame whose bin count differs from the detector's, a detector
    built with bin_count < 1 or t_span < 1, or an analyzer block size that
    does not map onto the detector's bin count. These signal a wiring defect
    between producer and consumer and are never coerced.
    """


def as_count(value, name: str, minimum: int = 1) -> int:
    """Integer size >= minimum, or ContractViolation. Floats and bools are rejected."""
    if isinstance(value, bool):
        raise ContractViolation(f"{name} must be an integer, got {value!r}")
    try:
        n = operator.index(value)
    except TypeError:
        raise ContractViolation(f"{name} must be an integer, got {value!r}") from None
    if n < minimum:
        raise ContractViolation(f"{name} must be >= {minimum}, got {n}")
    return n
