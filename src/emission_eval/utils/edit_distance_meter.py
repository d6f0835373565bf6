from typing import Hashable, List, Sequence, Tuple

from rapidfuzz.distance import Levenshtein


def edit_operations(
    hypothesis: Sequence[Hashable], reference: Sequence[Hashable]
) -> Tuple[int, int, int]:
    """
    Count the unit-cost edits turning the reference into the hypothesis.

    Elements are compared by equality only, so letters, words and raw
    indices all work. Any minimum-cost alignment gives the same total.

    Args:
        hypothesis: Predicted sequence
        reference: Ground truth sequence

    Returns:
        (substitutions, insertions, deletions)
    """
    substitutions = insertions = deletions = 0
    for tag, _, _ in Levenshtein.editops(list(reference), list(hypothesis)):
        if tag == "replace":
            substitutions += 1
        elif tag == "insert":
            insertions += 1
        else:
            deletions += 1
    return substitutions, insertions, deletions


def edit_distance(a: Sequence[Hashable], b: Sequence[Hashable]) -> int:
    return sum(edit_operations(a, b))


class EditDistanceMeter:
    """Streaming error-rate accumulator over (hypothesis, reference) pairs."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.substitutions = 0
        self.insertions = 0
        self.deletions = 0
        self.length = 0

    @property
    def edits(self) -> int:
        return self.substitutions + self.insertions + self.deletions

    def add(
        self, hypothesis: Sequence[Hashable], reference: Sequence[Hashable]
    ) -> int:
        """Accumulate one pair and return its edit distance."""
        substitutions, insertions, deletions = edit_operations(hypothesis, reference)
        self.substitutions += substitutions
        self.insertions += insertions
        self.deletions += deletions
        self.length += len(reference)
        return substitutions + insertions + deletions

    def value(self) -> List[float]:
        """Error rate in percent, 0 while no reference symbol was seen."""
        if self.length == 0:
            return [0.0]
        return [100.0 * self.edits / self.length]

    def __repr__(self) -> str:
        return (
            f"EditDistanceMeter(edits={self.edits}, length={self.length}, "
            f"rate={self.value()[0]:.2f}%)"
        )
