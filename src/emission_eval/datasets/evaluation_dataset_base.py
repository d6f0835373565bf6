from abc import ABC, abstractmethod
from logging import getLogger
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional

import numpy as np

from emission_eval.config.evaluation_config import EvaluationConfig
from emission_eval.utils.dictionary import Dictionary, LexiconMap


class EvaluationSample(NamedTuple):
    input: np.ndarray
    token_target: List[int]
    word_target: List[int]
    sample_id: str


class EvaluationDatasetBase(ABC):
    @abstractmethod
    def __init__(
        self,
        cfg: EvaluationConfig,
        dataset_name: str,
        dataset_path: Path,
        token_dict: Dictionary,
        word_dict: Optional[Dictionary] = None,
        lexicon: Optional[LexiconMap] = None,
    ):
        self.cfg = cfg
        self.dataset_name = dataset_name
        self.dataset_path = dataset_path
        self.token_dict = token_dict
        self.word_dict = word_dict
        self.lexicon = lexicon or {}
        self._log = getLogger(__name__)

    @abstractmethod
    def load_dataset(self) -> None:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[EvaluationSample]:
        pass
