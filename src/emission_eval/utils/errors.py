class EvaluationError(Exception):
    """Base class for errors raised by the evaluation pipeline."""


class ConfigurationError(EvaluationError, ValueError):
    """Fatal setup problem: bad dictionary, inconsistent class count, ambiguous config."""


class UnknownIndexError(ConfigurationError, KeyError):
    """An index or symbol has no entry in the dictionary it was looked up in."""

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the plain message instead
        return str(self.args[0]) if self.args else ""


class DataError(EvaluationError, ValueError):
    """A dataset record or model output is malformed."""
