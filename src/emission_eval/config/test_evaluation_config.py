import pytest
from omegaconf import OmegaConf
from pydantic import ValidationError

from emission_eval.config.evaluation_config import (
    EvaluationConfig,
    load_evaluation_config,
)
from emission_eval.utils.errors import ConfigurationError

BASE = {
    "am": "models/am.pt",
    "tokens_path": "data/tokens.txt",
    "test": "data/test.parquet",
    "emission_dir": "emissions",
}


def test_defaults_and_immutability():
    cfg = EvaluationConfig(**BASE)
    assert cfg.criterion == "ctc"
    assert cfg.shuffle_seed == 3
    assert cfg.sample_limit is None
    assert not cfg.use_lexicon
    with pytest.raises(ValidationError):
        cfg.show = True

    capped = cfg.model_copy(update={"max_samples": 10})
    assert capped.sample_limit == 10


def test_lexicon_with_seq2seq_is_rejected():
    with pytest.raises(ValidationError, match="lexicon cannot be combined"):
        EvaluationConfig(**BASE, lexicon_path="data/lexicon.txt", criterion="seq2seq")
    with pytest.raises(ConfigurationError, match="lexicon cannot be combined"):
        load_evaluation_config(
            OmegaConf.create(
                {**BASE, "lexicon_path": "data/lexicon.txt", "criterion": "seq2seq"}
            )
        )

    cfg = EvaluationConfig(**BASE, lexicon_path="data/lexicon.txt", criterion="ctc")
    assert cfg.use_lexicon


def test_asg_requires_transitions():
    with pytest.raises(ValidationError, match="requires criterion_path"):
        EvaluationConfig(**BASE, criterion="asg")
    with pytest.raises(ConfigurationError, match="requires criterion_path"):
        load_evaluation_config(OmegaConf.create({**BASE, "criterion": "asg"}))


def test_config_survives_json_round_trip():
    cfg = EvaluationConfig(**BASE, max_samples=5, word_separator=None)
    assert EvaluationConfig.model_validate_json(cfg.model_dump_json()) == cfg


def test_load_from_hydra_tree():
    cfg = load_evaluation_config(OmegaConf.create({**BASE, "show": True}))
    assert cfg.show

    with pytest.raises(ConfigurationError):
        load_evaluation_config(OmegaConf.create({**BASE, "am": "???"}))
    with pytest.raises(ConfigurationError):
        load_evaluation_config(OmegaConf.create({**BASE, "criterion": "hmm"}))
