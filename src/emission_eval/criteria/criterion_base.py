from abc import ABC, abstractmethod
from typing import List

import numpy as np

from emission_eval.config.evaluation_config import EvaluationConfig
from emission_eval.utils.dictionary import Dictionary
from emission_eval.utils.errors import ConfigurationError, DataError


class CriterionBase(ABC):
    """Sequence criterion used at test time for its Viterbi decoding only."""

    criterion_name: str
    has_transitions: bool = False

    @classmethod
    @abstractmethod
    def from_config(
        cls, cfg: EvaluationConfig, num_classes: int, token_dict: Dictionary
    ) -> "CriterionBase":
        pass

    @abstractmethod
    def decode(self, emission: np.ndarray) -> List[int]:
        """Best token index sequence for a `classes x frames` emission."""
        pass

    def parameter(self, index: int) -> np.ndarray:
        raise IndexError(f"{self.criterion_name} criterion has no parameter {index}")

    @staticmethod
    def _check_emission(emission: np.ndarray, num_classes: int) -> np.ndarray:
        emission = np.asarray(emission)
        if emission.ndim != 2:
            raise DataError(
                f"Expected a classes x frames emission, got shape {emission.shape}"
            )
        if emission.shape[0] != num_classes:
            raise ConfigurationError(
                f"Model emits {emission.shape[0]} classes, the criterion expects {num_classes}"
            )
        return emission

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
