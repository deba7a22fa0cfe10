"""Compare captured program output against a lesson's expected output."""

from __future__ import annotations

from codewalk.models import Verdict


def reconcile(actual: str | None, expected: str | None) -> Verdict:
    """Return the verdict for *actual* output against *expected*.

    Only leading and trailing whitespace is ignored; everything in between
    must match exactly.
    """
    if not expected or not actual:
        return Verdict.NOT_APPLICABLE
    if actual.strip() == expected.strip():
        return Verdict.MATCH
    return Verdict.MISMATCH
