from enum import Enum
from logging import getLogger
from pathlib import Path
from typing import Optional

import jiwer
import numpy as np
from pydantic import BaseModel

from emission_eval.config.evaluation_config import EvaluationConfig
from emission_eval.criteria.criterion_base import CriterionBase
from emission_eval.criteria.criterion_registry import criterion_registry
from emission_eval.datasets.dataset_registry import dataset_registry
from emission_eval.datasets.evaluation_dataset_base import (
    EvaluationDatasetBase,
    EvaluationSample,
)
from emission_eval.inference_models.acoustic_model_base import AcousticModelBase
from emission_eval.inference_models.model_registry import model_registry
from emission_eval.utils.dictionary import (
    create_token_dict,
    create_word_dict,
    load_lexicon,
)
from emission_eval.utils.emission_set import EmissionSet
from emission_eval.utils.errors import ConfigurationError, EvaluationError
from emission_eval.utils.meters import TestMeters
from emission_eval.utils.progress_manager import ProgressManager
from emission_eval.utils.token_word_mapper import TokenWordMapper


class EvaluatorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class EvaluationSummary(BaseModel):
    samples: int
    total_ler: float
    total_wer: float
    elapsed_seconds: float


def clean_filepath(path: Path) -> str:
    """Flatten a path into a file name, e.g. `data/test clean.parquet` -> `data#test#clean.parquet`."""
    return str(path).replace("\\", "#").replace("/", "#").replace(" ", "#")


class Evaluator:
    """
    Runs the acoustic model over a test set.

    Utterances are processed strictly one at a time: forward pass, criterion
    decoding, letter and word mapping, meter updates, then one EmissionSet
    record. The sample cap is only checked between utterances. The emission
    set is written only after a run that completed without error.
    """

    def __init__(
        self,
        cfg: EvaluationConfig,
        model: AcousticModelBase,
        criterion: CriterionBase,
        dataset: EvaluationDatasetBase,
        mapper: TokenWordMapper,
    ):
        self.cfg = cfg
        self.model = model
        self.criterion = criterion
        self.dataset = dataset
        self.mapper = mapper
        self._log = getLogger(__name__)
        self.meters = TestMeters()
        self.emission_set = EmissionSet(config_json=cfg.model_dump_json())
        self.state = EvaluatorState.IDLE
        self._completed = False

    @classmethod
    def from_config(cls, cfg: EvaluationConfig) -> "Evaluator":
        """Load dictionaries, model, criterion and test set described by the config."""
        log = getLogger(__name__)

        token_dict = create_token_dict(cfg.tokens_path)
        num_classes = token_dict.index_size()
        log.info(f"Number of classes (network): {num_classes}")

        word_dict = None
        lexicon = None
        if cfg.lexicon_path is not None:
            lexicon = load_lexicon(cfg.lexicon_path, cfg.max_word)
            word_dict = create_word_dict(lexicon)
            log.info(f"Number of words: {word_dict.index_size()}")

        mapper = TokenWordMapper(
            token_dict,
            word_dict,
            separator=cfg.word_separator,
            use_lexicon=cfg.use_lexicon,
            lexicon=lexicon,
        )

        if cfg.model_type not in model_registry:
            raise ConfigurationError(
                f"Unknown model type: {cfg.model_type}. "
                f"Available models: {list(model_registry.keys())}"
            )
        model = model_registry[cfg.model_type](cfg.model_type, cfg.am)
        model.load_model()

        criterion = criterion_registry[cfg.criterion].from_config(
            cfg, num_classes, token_dict
        )
        log.info(f"[Criterion] {criterion}")

        if cfg.dataset_type not in dataset_registry:
            raise ConfigurationError(
                f"Unknown dataset type: {cfg.dataset_type}. "
                f"Available datasets: {list(dataset_registry.keys())}"
            )
        dataset = dataset_registry[cfg.dataset_type](
            cfg, cfg.test.name, cfg.test, token_dict, word_dict, lexicon
        )
        dataset.load_dataset()

        return cls(cfg, model, criterion, dataset, mapper)

    @property
    def emission_path(self) -> Path:
        return self.cfg.emission_dir / (clean_filepath(self.cfg.test) + ".bin")

    def run(self) -> EvaluationSummary:
        """Entrypoint for the evaluation loop"""
        if self.state is not EvaluatorState.IDLE:
            raise EvaluationError(f"Evaluator already {self.state.value}")

        limit = self.cfg.sample_limit
        total = len(self.dataset) if limit is None else min(limit, len(self.dataset))
        self._log.info(f"Evaluating {total} samples from {self.cfg.test}")

        self.state = EvaluatorState.RUNNING
        self.meters.timer.resume()
        try:
            with ProgressManager() as progress:
                progress.start_sample_processing(self.dataset.dataset_name, total)
                for sample in self.dataset:
                    self._evaluate_sample(sample, progress)
                    progress.advance_sample()
                    if limit is not None and len(self.emission_set) >= limit:
                        self._log.info(f"Reached the sample cap of {limit}")
                        break
                progress.finish_sample_processing()

            if self.criterion.has_transitions:
                self.emission_set.set_transition(self.criterion.parameter(0))
        except Exception as e:
            self._log.error(
                f"Evaluation aborted after {len(self.emission_set)} samples: {e}"
            )
            raise
        finally:
            self.meters.timer.stop()
            self.state = EvaluatorState.STOPPED

        self._completed = True
        summary = EvaluationSummary(
            samples=len(self.emission_set),
            total_ler=self.meters.total_ler,
            total_wer=self.meters.total_wer,
            elapsed_seconds=self.meters.timer.value(),
        )
        self._log.info(
            f"[total WER: {summary.total_wer:.2f}%, total LER: {summary.total_ler:.2f}%, "
            f"time: {summary.elapsed_seconds:.2f}s]"
        )
        return summary

    def _evaluate_sample(self, sample: EvaluationSample, progress: ProgressManager):
        emission = np.asarray(self.model.forward(sample.input))
        token_prediction = self.criterion.decode(emission)

        letter_target = self.mapper.letters(sample.token_target)
        letter_prediction = self.mapper.letters(token_prediction)
        word_target = self.mapper.reference_words(letter_target, sample.word_target)
        word_prediction = self.mapper.hypothesis_words(letter_prediction)

        self.meters.add(
            letter_prediction,
            letter_target,
            word_prediction,
            word_target,
            per_sample=self.cfg.show,
        )
        if self.cfg.show:
            self._show_sample(
                sample.sample_id,
                letter_target,
                letter_prediction,
                word_target,
                word_prediction,
                progress,
            )

        self.emission_set.append(
            emission, sample.token_target, word_target, sample.sample_id
        )

    def _show_sample(
        self,
        sample_id: str,
        letter_target,
        letter_prediction,
        word_target,
        word_prediction,
        progress: ProgressManager,
    ):
        lines = [
            f"|T|: {self.mapper.to_string(letter_target)}",
            f"|P|: {self.mapper.to_string(letter_prediction)}",
        ]
        if self.cfg.show_alignment and word_target and word_prediction:
            alignment = jiwer.process_words(" ".join(word_target), " ".join(word_prediction))
            lines.append(jiwer.visualize_alignment(alignment, show_measures=False))
        lines.append(
            f"[sample: {sample_id}, WER: {self.meters.sample_wer_value:.2f}%, "
            f"LER: {self.meters.sample_ler_value:.2f}%, "
            f"total WER: {self.meters.total_wer:.2f}%, "
            f"total LER: {self.meters.total_ler:.2f}%]"
        )
        for line in lines:
            progress.print(line, markup=False, highlight=False)

    def save_emissions(self, path: Optional[Path] = None) -> Path:
        """Serialize the emission set of a completed run for the decoding stage."""
        if not self._completed:
            raise EvaluationError("Emissions can only be saved after a completed run")
        path = path or self.emission_path
        self._log.info(f"[Serialization] Saving into file: {path}")
        return self.emission_set.save(path)
