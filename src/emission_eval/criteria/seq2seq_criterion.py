from typing import List, Optional

import numpy as np

from emission_eval.config.evaluation_config import EvaluationConfig
from emission_eval.criteria.criterion_base import CriterionBase
from emission_eval.utils.dictionary import Dictionary
from emission_eval.utils.errors import ConfigurationError


class Seq2SeqCriterion(CriterionBase):
    """Greedy read-out of per-step decoder scores, stopping at end-of-sentence."""

    criterion_name = "seq2seq"

    def __init__(self, num_classes: int, eos_index: Optional[int] = None):
        if eos_index is not None and not 0 <= eos_index < num_classes:
            raise ConfigurationError(
                f"EOS index {eos_index} outside of {num_classes} classes"
            )
        self.num_classes = num_classes
        self.eos_index = eos_index

    @classmethod
    def from_config(
        cls, cfg: EvaluationConfig, num_classes: int, token_dict: Dictionary
    ) -> "Seq2SeqCriterion":
        eos_index = None
        if cfg.eos_token is not None:
            eos_index = token_dict.get_index(cfg.eos_token)
        return cls(num_classes, eos_index)

    def decode(self, emission: np.ndarray) -> List[int]:
        emission = self._check_emission(emission, self.num_classes)
        path = emission.argmax(axis=0).tolist()
        if self.eos_index is not None and self.eos_index in path:
            path = path[: path.index(self.eos_index)]
        return path

    def __repr__(self) -> str:
        return f"Seq2SeqCriterion(num_classes={self.num_classes}, eos={self.eos_index})"
