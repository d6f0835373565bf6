from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import numpy as np
import polars as pl
from datasets import Dataset

from emission_eval.config.evaluation_config import EvaluationConfig
from emission_eval.datasets.evaluation_dataset_base import (
    EvaluationDatasetBase,
    EvaluationSample,
)
from emission_eval.utils.dictionary import Dictionary, LexiconMap
from emission_eval.utils.errors import DataError

REQUIRED_COLUMNS = ("sample_id", "features_path", "transcript")


class ParquetFeatureDataset(EvaluationDatasetBase):
    """
    Test set described by a parquet manifest.

    Each row names an utterance (`sample_id`), a `.npy` file of
    `frames x features` input features (`features_path`, relative to the
    manifest directory unless absolute) and its word-level `transcript`.
    """

    def __init__(
        self,
        cfg: EvaluationConfig,
        dataset_name: str,
        dataset_path: Path,
        token_dict: Dictionary,
        word_dict: Optional[Dictionary] = None,
        lexicon: Optional[LexiconMap] = None,
    ):
        super().__init__(cfg, dataset_name, dataset_path, token_dict, word_dict, lexicon)
        self._dataset: Optional[Dataset] = None

    def load_dataset(self) -> None:
        df = self._load_dataset_df()
        self._dataset = Dataset.from_list(df.to_dicts())
        if self.cfg.shuffle_seed is not None:
            self._dataset = self._dataset.shuffle(seed=self.cfg.shuffle_seed)
        self._log.info(
            f"Loaded dataset {self.dataset_name} with {len(self._dataset)} samples"
        )

    def _load_dataset_df(self) -> pl.DataFrame:
        if not Path(self.dataset_path).exists():
            raise DataError(f"Test set manifest not found: {self.dataset_path}")
        df = pl.read_parquet(self.dataset_path)
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise DataError(f"Manifest {self.dataset_path} lacks columns {missing}")
        df = df.select(REQUIRED_COLUMNS).with_columns(
            pl.col("sample_id").cast(pl.Utf8),
            pl.col("features_path").cast(pl.Utf8),
            pl.col("transcript").cast(pl.Utf8).fill_null(""),
        )
        if df["sample_id"].null_count() or df["features_path"].null_count():
            raise DataError(f"Manifest {self.dataset_path} has empty sample ids or paths")
        return df

    def __len__(self) -> int:
        if self._dataset is None:
            raise RuntimeError("load_dataset() must be called first")
        return len(self._dataset)

    def __iter__(self) -> Iterator[EvaluationSample]:
        if self._dataset is None:
            raise RuntimeError("load_dataset() must be called first")
        for row in self._dataset:
            yield self.process_row(row)

    def process_row(self, row: Dict[str, Any]) -> EvaluationSample:
        words = row["transcript"].split()
        return EvaluationSample(
            input=self._load_features(row["features_path"], row["sample_id"]),
            token_target=self.words_to_tokens(words),
            word_target=self.words_to_word_ids(words),
            sample_id=row["sample_id"],
        )

    def _load_features(self, features_path: str, sample_id: str) -> np.ndarray:
        path = Path(features_path)
        if not path.is_absolute():
            path = Path(self.dataset_path).parent / path
        if not path.exists():
            raise DataError(f"Features of '{sample_id}' not found: {path}")
        features = np.load(path, allow_pickle=False)
        if features.ndim != 2:
            raise DataError(
                f"Features of '{sample_id}' must be frames x features, "
                f"got shape {features.shape}"
            )
        return features.astype(np.float32, copy=False)

    def words_to_tokens(self, words: List[str]) -> List[int]:
        """Spell words with the lexicon when possible, letter by letter otherwise."""
        separator = self.cfg.word_separator
        tokens: List[int] = []
        for position, word in enumerate(words):
            if position > 0 and separator is not None:
                tokens.append(self.token_dict.get_index(separator))
            spellings = self.lexicon.get(word)
            spelling = spellings[0] if spellings else list(word)
            tokens.extend(self.token_dict.get_index(token) for token in spelling)
        return tokens

    def words_to_word_ids(self, words: List[str]) -> List[int]:
        if self.word_dict is None:
            return []
        return [self.word_dict.get_index(word) for word in words]
