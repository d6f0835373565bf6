"""
Index <-> symbol dictionaries for tokens and words.

Dictionaries are built once at startup and only read afterwards, so a single
instance can be shared by the dataset, the mapper and the criterion.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from emission_eval.utils.errors import ConfigurationError, UnknownIndexError

logger = logging.getLogger(__name__)

UNK_TOKEN = "<unk>"

# word -> list of spellings, each spelling a list of token symbols
LexiconMap = Dict[str, List[List[str]]]


class Dictionary:
    """Bidirectional mapping between integer indices and symbol strings."""

    def __init__(self, entries: Optional[Iterable[str]] = None):
        self._entry_to_index: Dict[str, int] = {}
        self._index_to_entry: Dict[int, str] = {}
        self._default_index: Optional[int] = None
        for entry in entries or []:
            self.add_entry(entry)

    def add_entry(self, entry: str, index: Optional[int] = None) -> int:
        if entry in self._entry_to_index:
            return self._entry_to_index[entry]
        if index is None:
            index = len(self._index_to_entry)
        self._entry_to_index[entry] = index
        # several entries may alias one index, the first one is used for output
        self._index_to_entry.setdefault(index, entry)
        return index

    def set_default_index(self, index: int) -> None:
        if index not in self._index_to_entry:
            raise ConfigurationError(f"Default index {index} is not in the dictionary")
        self._default_index = index

    def contains(self, entry: str) -> bool:
        return entry in self._entry_to_index

    def __contains__(self, entry: str) -> bool:
        return self.contains(entry)

    def index_size(self) -> int:
        return len(self._index_to_entry)

    def entry_size(self) -> int:
        return len(self._entry_to_index)

    def __len__(self) -> int:
        return self.index_size()

    def get_index(self, entry: str) -> int:
        """Look up the index of a symbol, falling back to the default index if one is set."""
        index = self._entry_to_index.get(entry)
        if index is not None:
            return index
        if self._default_index is not None:
            return self._default_index
        raise UnknownIndexError(f"Unknown entry in dictionary: '{entry}'")

    def get_entry(self, index: int) -> str:
        try:
            return self._index_to_entry[int(index)]
        except KeyError:
            raise UnknownIndexError(
                f"Index {index} has no entry (dictionary size {self.index_size()})"
            ) from None

    def is_contiguous(self) -> bool:
        return set(self._index_to_entry) == set(range(self.index_size()))


def create_token_dict(tokens_path: Path) -> Dictionary:
    """
    Read a token dictionary file.

    Every non-empty line holds one token in its first column; any further
    columns are aliases mapped to the same index.

    Args:
        tokens_path: Path of the token file

    Returns:
        The token dictionary
    """
    tokens_path = Path(tokens_path)
    if not tokens_path.exists():
        raise ConfigurationError(f"Token dictionary not found: {tokens_path}")

    token_dict = Dictionary()
    with tokens_path.open(encoding="utf-8") as f:
        for line in f:
            columns = line.rstrip("\n").split()
            if not columns:
                continue
            index = token_dict.add_entry(columns[0])
            for alias in columns[1:]:
                token_dict.add_entry(alias, index)

    if token_dict.index_size() == 0:
        raise ConfigurationError(f"Empty token dictionary: {tokens_path}")
    if not token_dict.is_contiguous():
        raise ConfigurationError(f"Token dictionary has index gaps: {tokens_path}")
    logger.info(f"Loaded {token_dict.index_size()} tokens from {tokens_path}")
    return token_dict


def load_lexicon(lexicon_path: Path, max_word: int = -1) -> LexiconMap:
    """Read `word spelling...` lines; a word may appear on several lines."""
    lexicon_path = Path(lexicon_path)
    if not lexicon_path.exists():
        raise ConfigurationError(f"Lexicon not found: {lexicon_path}")

    lexicon: LexiconMap = {}
    with lexicon_path.open(encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            columns = line.split()
            if not columns:
                continue
            if len(columns) < 2:
                raise ConfigurationError(
                    f"Lexicon line {line_number} has no spelling: '{line.strip()}'"
                )
            word, spelling = columns[0], columns[1:]
            if word not in lexicon and 0 <= max_word <= len(lexicon):
                break
            lexicon.setdefault(word, []).append(spelling)

    logger.info(f"Loaded {len(lexicon)} words from {lexicon_path}")
    return lexicon


def create_word_dict(lexicon: LexiconMap) -> Dictionary:
    word_dict = Dictionary(lexicon.keys())
    unk_index = word_dict.add_entry(UNK_TOKEN)
    word_dict.set_default_index(unk_index)
    return word_dict
