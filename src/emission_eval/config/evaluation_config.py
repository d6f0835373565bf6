from pathlib import Path
from typing import Literal, Optional

from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import MissingMandatoryValue
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from emission_eval.utils.errors import ConfigurationError


class LoggerConfig(BaseModel):
    """Configuration for logging settings."""

    model_config = ConfigDict(frozen=True)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="The logging level to use"
    )
    log_file: Optional[Path] = Field(
        default=None, description="Path to log file. If None, logs only to console"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Format string for log messages",
    )
    use_rich_logging: bool = Field(
        default=True, description="Whether to use rich formatting for console output"
    )
    show_terminal_logs: bool = Field(
        default=True, description="Whether to show logs in the terminal/console"
    )


class EvaluationConfig(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    am: Path = Field(description="Path of the trained acoustic model")
    model_type: str = Field(
        default="torchscript", description="Key of the acoustic model registry"
    )
    criterion: Literal["ctc", "asg", "seq2seq"] = Field(
        default="ctc", description="The criterion family the model was trained with"
    )
    criterion_path: Optional[Path] = Field(
        default=None,
        description="Learned criterion parameters (.npy transition matrix for asg)",
    )
    tokens_path: Path = Field(description="Token dictionary, one token per line")
    lexicon_path: Optional[Path] = Field(
        default=None, description="Lexicon mapping words to token spellings"
    )
    max_word: int = Field(
        default=-1, description="Number of lexicon words to load, -1 loads all"
    )
    word_separator: Optional[str] = Field(
        default="|", description="Token that ends a word when collapsing letters"
    )
    blank_token: Optional[str] = Field(
        default=None,
        description="CTC blank token. If None, the blank is the class after the last token",
    )
    eos_token: Optional[str] = Field(
        default=None, description="End-of-sentence token of seq2seq models"
    )
    test: Path = Field(description="Path of the test set manifest")
    dataset_type: str = Field(
        default="parquet_features", description="Key of the dataset registry"
    )
    shuffle_seed: Optional[int] = Field(
        default=3, description="Seed of the test set shuffle. If None, keeps file order"
    )
    max_samples: int = Field(
        default=-1, description="Maximum number of utterances to evaluate, <= 0 for all"
    )
    show: bool = Field(
        default=False, description="Whether to print diagnostics for every utterance"
    )
    show_alignment: bool = Field(
        default=False,
        description="Whether per-utterance diagnostics include the word alignment",
    )
    emission_dir: Path = Field(description="The directory to save the emission set")

    # Logging configuration
    logging: LoggerConfig = Field(
        default_factory=LoggerConfig, description="Logging configuration settings"
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "EvaluationConfig":
        if self.lexicon_path is not None and self.criterion == "seq2seq":
            raise ValueError(
                "A lexicon cannot be combined with the seq2seq criterion: "
                "word references would be ambiguous"
            )
        if self.criterion == "asg" and self.criterion_path is None:
            raise ValueError("The asg criterion requires criterion_path")
        return self

    @property
    def use_lexicon(self) -> bool:
        return self.lexicon_path is not None and self.criterion != "seq2seq"

    @property
    def sample_limit(self) -> Optional[int]:
        return self.max_samples if self.max_samples > 0 else None


def load_evaluation_config(cfg: DictConfig) -> EvaluationConfig:
    """Build the frozen run configuration from the hydra config tree."""
    try:
        values = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        return EvaluationConfig(**values)
    except MissingMandatoryValue as e:
        raise ConfigurationError(f"Missing config value: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Invalid evaluation config:\n{e}") from e
