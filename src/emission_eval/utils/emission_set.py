"""
Per-utterance emission store handed to the decoding stage.

Records are kept as parallel lists. Each emission matrix is stored as a flat
row-major float32 buffer of `emission_n * emission_t[i]` values, the class
count being fixed for the whole set, so the on-disk format does not depend
on a 2-D array type.

On disk the set is a numpy `.npz` container written without pickling. Ragged
collections are concatenated and paired with an offsets array, which makes
the file self-describing: the utterance count is `len(emission_t)`.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from emission_eval.utils.errors import ConfigurationError, DataError, EvaluationError

logger = logging.getLogger(__name__)

FORMAT_NAME = "emission-set"
FORMAT_VERSION = 1


def _offsets(lengths: Sequence[int]) -> np.ndarray:
    offsets = np.zeros(len(lengths) + 1, dtype=np.int64)
    np.cumsum(np.asarray(lengths, dtype=np.int64), out=offsets[1:])
    return offsets


def _split(flat: np.ndarray, offsets: np.ndarray) -> List[np.ndarray]:
    return [flat[offsets[i] : offsets[i + 1]] for i in range(len(offsets) - 1)]


class EmissionSet:
    """Append-only record store, sealed once it has been saved."""

    def __init__(self, config_json: str = ""):
        self.emissions: List[np.ndarray] = []
        self.emission_t: List[int] = []
        self.token_targets: List[np.ndarray] = []
        self.word_targets: List[List[str]] = []
        self.sample_ids: List[str] = []
        self.emission_n: Optional[int] = None
        self.transition: Optional[np.ndarray] = None
        self.config_json = config_json
        self._sealed = False

    def __len__(self) -> int:
        return len(self.sample_ids)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def append(
        self,
        emission: np.ndarray,
        token_target: Sequence[int],
        word_target: Sequence[str],
        sample_id: str,
    ) -> None:
        """
        Add one utterance.

        Args:
            emission: `classes x frames` score matrix
            token_target: Reference token indices
            word_target: Reference words
            sample_id: Utterance identifier

        Raises:
            ConfigurationError: the class count differs from earlier records
            DataError: the record itself is malformed
        """
        if self._sealed:
            raise EvaluationError("EmissionSet is sealed, no records can be added")

        emission = np.asarray(emission, dtype=np.float32)
        if emission.ndim != 2:
            raise DataError(
                f"Emission for '{sample_id}' must be 2-D (classes x frames), "
                f"got shape {emission.shape}"
            )
        num_classes, num_frames = emission.shape
        if self.emission_n is not None and num_classes != self.emission_n:
            raise ConfigurationError(
                f"Emission for '{sample_id}' has {num_classes} classes, "
                f"expected {self.emission_n} as in previous utterances"
            )

        tokens = np.asarray(token_target, dtype=np.int64).reshape(-1)
        if tokens.size and tokens.min() < 0:
            raise DataError(f"Negative token index in target of '{sample_id}'")
        if not isinstance(sample_id, str) or not sample_id:
            raise DataError(f"Invalid sample id: {sample_id!r}")
        words = [str(word) for word in word_target]
        # numpy string arrays drop trailing NULs on save
        if "\0" in sample_id or any("\0" in word for word in words):
            raise DataError(f"NUL character in sample id or words of {sample_id!r}")

        self.emission_n = num_classes
        self.emissions.append(np.ascontiguousarray(emission).reshape(-1).copy())
        self.emission_t.append(int(num_frames))
        self.token_targets.append(tokens.copy())
        self.word_targets.append(words)
        self.sample_ids.append(sample_id)

    def set_transition(self, transition: np.ndarray) -> None:
        if self._sealed:
            raise EvaluationError("EmissionSet is sealed, transitions cannot be set")
        if self.transition is not None:
            raise ConfigurationError("Transition parameters are already attached")
        self.transition = np.asarray(transition, dtype=np.float32).reshape(-1).copy()

    def emission(self, index: int) -> np.ndarray:
        return self.emissions[index].reshape(self.emission_n, self.emission_t[index])

    def save(self, path: Path) -> Path:
        """
        Seal the set and write it to `path` atomically.

        The data goes to a temporary file in the target directory which is
        then renamed over `path`, so readers never see a partial artifact.
        """
        path = Path(path)
        self._sealed = True
        path.parent.mkdir(parents=True, exist_ok=True)

        arrays = {
            "format": np.array(FORMAT_NAME),
            "format_version": np.array(FORMAT_VERSION, dtype=np.int64),
            "emission_n": np.array(
                self.emission_n if self.emission_n is not None else 0, dtype=np.int64
            ),
            "emission_t": np.asarray(self.emission_t, dtype=np.int64),
            "emissions": (
                np.concatenate(self.emissions)
                if self.emissions
                else np.zeros(0, dtype=np.float32)
            ),
            "token_targets": (
                np.concatenate(self.token_targets)
                if self.token_targets
                else np.zeros(0, dtype=np.int64)
            ),
            "token_offsets": _offsets([len(t) for t in self.token_targets]),
            "words": np.array(
                [word for words in self.word_targets for word in words], dtype=np.str_
            ),
            "word_offsets": _offsets([len(w) for w in self.word_targets]),
            "sample_ids": np.array(self.sample_ids, dtype=np.str_),
            "has_transition": np.array(self.transition is not None),
            "transition": (
                self.transition
                if self.transition is not None
                else np.zeros(0, dtype=np.float32)
            ),
            "config": np.array(self.config_json, dtype=np.str_),
        }

        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                np.savez(f, **arrays)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

        logger.info(f"Saved {len(self)} utterances to {path}")
        return path

    @classmethod
    def load(cls, path: Path) -> "EmissionSet":
        with np.load(Path(path), allow_pickle=False) as data:
            if "format" not in data.files or data["format"].item() != FORMAT_NAME:
                raise DataError(f"{path} is not an emission set")
            version = int(data["format_version"])
            if version != FORMAT_VERSION:
                raise DataError(f"Unsupported emission set version {version} in {path}")

            emission_set = cls(config_json=data["config"].item())
            emission_n = int(data["emission_n"])
            emission_t = [int(t) for t in data["emission_t"]]
            emissions = data["emissions"]
            if emissions.size != emission_n * sum(emission_t):
                raise DataError(
                    f"Emission buffer of {path} holds {emissions.size} values, "
                    f"expected {emission_n} x {sum(emission_t)}"
                )

            emission_set.emission_n = emission_n if emission_t else None
            emission_set.emission_t = emission_t
            emission_set.emissions = [
                e.copy() for e in _split(emissions, _offsets([emission_n * t for t in emission_t]))
            ]
            emission_set.token_targets = [
                t.copy() for t in _split(data["token_targets"], data["token_offsets"])
            ]
            emission_set.word_targets = [
                [str(w) for w in words]
                for words in _split(data["words"], data["word_offsets"])
            ]
            emission_set.sample_ids = [str(s) for s in data["sample_ids"]]
            if bool(data["has_transition"]):
                emission_set.transition = data["transition"].copy()

        counts = {
            len(emission_set.emissions),
            len(emission_set.token_targets),
            len(emission_set.word_targets),
            len(emission_set.sample_ids),
        }
        if len(counts) != 1:
            raise DataError(f"Inconsistent record counts in {path}: {sorted(counts)}")
        emission_set._sealed = True
        return emission_set
