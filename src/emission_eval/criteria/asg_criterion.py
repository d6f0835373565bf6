from typing import List

import numpy as np

from emission_eval.config.evaluation_config import EvaluationConfig
from emission_eval.criteria.criterion_base import CriterionBase
from emission_eval.utils.dictionary import Dictionary
from emission_eval.utils.errors import ConfigurationError
from emission_eval.utils.token_word_mapper import collapse_repeats


class ASGCriterion(CriterionBase):
    """
    Auto Segmentation criterion.

    Holds a learned `classes x classes` transition matrix where
    `transitions[next, prev]` scores moving from `prev` to `next`. Decoding is
    a Viterbi search over emission plus transition scores; repeated labels of
    the best frame path are merged afterwards.
    """

    criterion_name = "asg"
    has_transitions = True

    def __init__(self, transitions: np.ndarray):
        transitions = np.asarray(transitions, dtype=np.float32)
        if transitions.ndim != 2 or transitions.shape[0] != transitions.shape[1]:
            raise ConfigurationError(
                f"ASG transitions must be a square matrix, got shape {transitions.shape}"
            )
        self.transitions = transitions
        self.num_classes = transitions.shape[0]

    @classmethod
    def from_config(
        cls, cfg: EvaluationConfig, num_classes: int, token_dict: Dictionary
    ) -> "ASGCriterion":
        if cfg.criterion_path is None or not cfg.criterion_path.exists():
            raise ConfigurationError(
                f"ASG transition parameters not found: {cfg.criterion_path}"
            )
        transitions = np.load(cfg.criterion_path, allow_pickle=False)
        if transitions.ndim == 1:
            if transitions.size != num_classes * num_classes:
                raise ConfigurationError(
                    f"ASG transitions hold {transitions.size} values, "
                    f"expected {num_classes} x {num_classes}"
                )
            transitions = transitions.reshape(num_classes, num_classes)
        criterion = cls(transitions)
        if criterion.num_classes != num_classes:
            raise ConfigurationError(
                f"ASG transitions cover {criterion.num_classes} classes, "
                f"the token dictionary has {num_classes}"
            )
        return criterion

    def viterbi_path(self, emission: np.ndarray) -> np.ndarray:
        emission = self._check_emission(emission, self.num_classes)
        num_frames = emission.shape[1]
        if num_frames == 0:
            return np.zeros(0, dtype=np.int64)

        scores = emission[:, 0].astype(np.float64)
        backpointers = np.zeros((num_frames, self.num_classes), dtype=np.int64)
        for t in range(1, num_frames):
            # candidates[next, prev]
            candidates = self.transitions + scores[np.newaxis, :]
            backpointers[t] = candidates.argmax(axis=1)
            scores = candidates.max(axis=1) + emission[:, t]

        path = np.zeros(num_frames, dtype=np.int64)
        path[-1] = scores.argmax()
        for t in range(num_frames - 1, 0, -1):
            path[t - 1] = backpointers[t, path[t]]
        return path

    def decode(self, emission: np.ndarray) -> List[int]:
        return collapse_repeats(self.viterbi_path(emission).tolist())

    def parameter(self, index: int) -> np.ndarray:
        if index != 0:
            return super().parameter(index)
        return self.transitions.reshape(-1)

    def __repr__(self) -> str:
        return f"ASGCriterion(num_classes={self.num_classes})"
