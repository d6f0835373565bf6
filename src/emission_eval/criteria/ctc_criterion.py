from typing import List

import numpy as np

from emission_eval.config.evaluation_config import EvaluationConfig
from emission_eval.criteria.criterion_base import CriterionBase
from emission_eval.utils.dictionary import Dictionary
from emission_eval.utils.errors import ConfigurationError
from emission_eval.utils.token_word_mapper import collapse_repeats


class CTCCriterion(CriterionBase):
    criterion_name = "ctc"

    def __init__(self, num_classes: int, blank_index: int):
        if not 0 <= blank_index < num_classes:
            raise ConfigurationError(
                f"Blank index {blank_index} outside of {num_classes} classes"
            )
        self.num_classes = num_classes
        self.blank_index = blank_index

    @classmethod
    def from_config(
        cls, cfg: EvaluationConfig, num_classes: int, token_dict: Dictionary
    ) -> "CTCCriterion":
        if cfg.blank_token is not None:
            return cls(num_classes, token_dict.get_index(cfg.blank_token))
        # the network emits one extra class after the tokens for the blank
        return cls(num_classes + 1, num_classes)

    def decode(self, emission: np.ndarray) -> List[int]:
        emission = self._check_emission(emission, self.num_classes)
        best_path = emission.argmax(axis=0)
        return collapse_repeats(best_path.tolist(), blank=self.blank_index)

    def __repr__(self) -> str:
        return f"CTCCriterion(num_classes={self.num_classes}, blank={self.blank_index})"
