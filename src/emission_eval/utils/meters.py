import time
from typing import Hashable, Optional, Sequence

from emission_eval.utils.edit_distance_meter import EditDistanceMeter


class TimeMeter:
    """Wall-clock timer accumulating over resume/stop intervals."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._elapsed = 0.0
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def resume(self) -> None:
        if self._started_at is None:
            self._started_at = time.time()

    def stop(self) -> None:
        if self._started_at is not None:
            self._elapsed += time.time() - self._started_at
            self._started_at = None

    def value(self) -> float:
        if self._started_at is None:
            return self._elapsed
        return self._elapsed + time.time() - self._started_at


class TestMeters:
    """
    Error-rate meters for one evaluation run.

    `ler`/`wer` cover the whole corpus and only grow. `sample_ler` and
    `sample_wer` are separate instances holding exactly the last utterance
    fed through `add(..., per_sample=True)`.
    """

    __test__ = False

    def __init__(self):
        self.ler = EditDistanceMeter()
        self.wer = EditDistanceMeter()
        self.sample_ler = EditDistanceMeter()
        self.sample_wer = EditDistanceMeter()
        self.timer = TimeMeter()

    def reset_sample(self) -> None:
        self.sample_ler.reset()
        self.sample_wer.reset()

    def add(
        self,
        letter_hypothesis: Sequence[Hashable],
        letter_reference: Sequence[Hashable],
        word_hypothesis: Sequence[Hashable],
        word_reference: Sequence[Hashable],
        per_sample: bool = False,
    ) -> None:
        self.ler.add(letter_hypothesis, letter_reference)
        self.wer.add(word_hypothesis, word_reference)
        if per_sample:
            self.reset_sample()
            self.sample_ler.add(letter_hypothesis, letter_reference)
            self.sample_wer.add(word_hypothesis, word_reference)

    @property
    def total_ler(self) -> float:
        return self.ler.value()[0]

    @property
    def total_wer(self) -> float:
        return self.wer.value()[0]

    @property
    def sample_ler_value(self) -> float:
        return self.sample_ler.value()[0]

    @property
    def sample_wer_value(self) -> float:
        return self.sample_wer.value()[0]
