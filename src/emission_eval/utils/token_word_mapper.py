"""
Conversion of label index sequences into letters and words.

The letter-collapse rule and the lexicon lookup are the two ways of turning a
reference into words. Which one applies is fixed for the whole run by
`TokenWordMapper` so hypothesis and reference WER stay comparable.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from emission_eval.utils.dictionary import Dictionary, LexiconMap
from emission_eval.utils.errors import ConfigurationError


def indices_to_symbols(sequence: Sequence[int], dictionary: Dictionary) -> List[str]:
    """Map every index through the dictionary, raising UnknownIndexError on a miss."""
    return [dictionary.get_entry(index) for index in sequence]


def symbols_to_words(symbols: Sequence[str], separator: Optional[str]) -> List[str]:
    """
    Collapse letters into words.

    Contiguous non-separator symbols form one word and the separator closes
    it, so leading, trailing and doubled separators never yield empty words.
    Without a separator the whole sequence is a single word.

    Args:
        symbols: Letter sequence
        separator: Word separator symbol, or None

    Returns:
        List of words
    """
    words: List[str] = []
    current: List[str] = []
    for symbol in symbols:
        if separator is not None and symbol == separator:
            if current:
                words.append("".join(current))
                current = []
        else:
            current.append(symbol)
    if current:
        words.append("".join(current))
    return words


def word_indices_to_words(sequence: Sequence[int], word_dict: Dictionary) -> List[str]:
    return indices_to_symbols(sequence, word_dict)


def symbols_to_string(symbols: Iterable[str]) -> str:
    return "".join(symbols)


def collapse_repeats(sequence: Sequence[int], blank: Optional[int] = None) -> List[int]:
    """Drop consecutive duplicates, then blanks (blanks still separate repeats)."""
    collapsed: List[int] = []
    previous = None
    for index in sequence:
        index = int(index)
        if index != previous and index != blank:
            collapsed.append(index)
        previous = index
    return collapsed


class TokenWordMapper:
    """
    Run-wide letter/word mapping policy.

    With `use_lexicon` the reference words come from the word ids of the
    dataset. Decoded tokens carry no word ids, so hypothesis words are
    letter-collapsed and then mapped back through the lexicon spellings: a
    word spelled `k a t` in the lexicon is reported as the lexicon word, not
    as `kat`. Collapsed words matching no spelling are kept as they are and
    count as errors against in-vocabulary references.
    """

    def __init__(
        self,
        token_dict: Dictionary,
        word_dict: Optional[Dictionary] = None,
        separator: Optional[str] = None,
        use_lexicon: bool = False,
        lexicon: Optional[LexiconMap] = None,
    ):
        if use_lexicon and word_dict is None:
            raise ConfigurationError("Lexicon word mapping requires a word dictionary")
        if separator is not None and not token_dict.contains(separator):
            raise ConfigurationError(
                f"Word separator '{separator}' is not in the token dictionary"
            )
        self.token_dict = token_dict
        self.word_dict = word_dict
        self.separator = separator
        self.use_lexicon = use_lexicon

        # first word listed wins when several words share a spelling
        self._spelling_to_word: Dict[str, str] = {}
        for word, spellings in (lexicon or {}).items():
            for spelling in spellings:
                key = symbols_to_string(s for s in spelling if s != separator)
                self._spelling_to_word.setdefault(key, word)

    def letters(self, token_indices: Sequence[int]) -> List[str]:
        return indices_to_symbols(token_indices, self.token_dict)

    def reference_words(
        self, letters: Sequence[str], word_indices: Sequence[int] = ()
    ) -> List[str]:
        if self.use_lexicon:
            return word_indices_to_words(word_indices, self.word_dict)
        return symbols_to_words(letters, self.separator)

    def hypothesis_words(self, letters: Sequence[str]) -> List[str]:
        words = symbols_to_words(letters, self.separator)
        if self.use_lexicon:
            return [self._spelling_to_word.get(word, word) for word in words]
        return words

    def to_string(self, letters: Sequence[str]) -> str:
        return symbols_to_string(letters)
