import pytest

from emission_eval.utils.dictionary import Dictionary, create_word_dict
from emission_eval.utils.errors import ConfigurationError, UnknownIndexError
from emission_eval.utils.token_word_mapper import (
    TokenWordMapper,
    collapse_repeats,
    indices_to_symbols,
    symbols_to_string,
    symbols_to_words,
)


@pytest.fixture
def token_dict():
    return Dictionary(["|", "c", "a", "t", "d", "o", "g"])


def test_indices_to_symbols(token_dict):
    assert indices_to_symbols([1, 2, 2, 3], token_dict) == ["c", "a", "a", "t"]
    assert indices_to_symbols([], token_dict) == []


def test_indices_to_symbols_unknown_index(token_dict):
    with pytest.raises(UnknownIndexError):
        indices_to_symbols([1, 42], token_dict)


def test_symbols_to_words_letter_collapse():
    letters = ["|", "c", "a", "t", "|", "|", "d", "o", "g", "|"]
    assert symbols_to_words(letters, "|") == ["cat", "dog"]
    assert symbols_to_words(["c", "a", "t"], None) == ["cat"]
    assert symbols_to_words(["|", "|"], "|") == []
    assert symbols_to_words([], "|") == []


def test_collapse_repeats():
    assert collapse_repeats([1, 1, 0, 1, 2, 2, 0, 0], blank=0) == [1, 1, 2]
    assert collapse_repeats([3, 3, 3, 4]) == [3, 4]


def test_symbols_to_string():
    assert symbols_to_string(["c", "a", "t", "|", "d"]) == "cat|d"


def test_mapper_letter_collapse_policy(token_dict):
    mapper = TokenWordMapper(token_dict, separator="|")
    letters = mapper.letters([1, 2, 3, 0, 4, 5, 6])
    assert mapper.reference_words(letters) == ["cat", "dog"]
    assert mapper.hypothesis_words(letters) == ["cat", "dog"]


def test_mapper_defers_to_lexicon_without_separator(token_dict):
    word_dict = create_word_dict({"cat": [["c", "a", "t"]], "dog": [["d", "o", "g"]]})
    mapper = TokenWordMapper(token_dict, word_dict, separator=None, use_lexicon=True)

    letters = mapper.letters([1, 2, 3])
    reference = mapper.reference_words(letters, [word_dict.get_index("cat")])
    hypothesis = mapper.hypothesis_words(letters)
    assert reference == ["cat"]
    assert hypothesis == reference

    # the word ids decide the reference, not the letters
    assert mapper.reference_words(letters, [word_dict.get_index("dog")]) == ["dog"]


def test_mapper_rejects_inconsistent_policy(token_dict):
    with pytest.raises(ConfigurationError):
        TokenWordMapper(token_dict, None, use_lexicon=True)
    with pytest.raises(ConfigurationError):
        TokenWordMapper(token_dict, separator="_")


def test_mapper_reads_hypotheses_through_lexicon_spellings():
    token_dict = Dictionary(["|", "c", "a", "t", "k", "o", "g", "d"])
    lexicon = {"cat": [["k", "a", "t"], ["c", "a", "t"]], "dog": [["d", "o", "g"]]}
    word_dict = create_word_dict(lexicon)
    mapper = TokenWordMapper(
        token_dict, word_dict, separator="|", use_lexicon=True, lexicon=lexicon
    )

    reference = mapper.reference_words([], [word_dict.get_index("cat")])
    assert reference == ["cat"]
    # both spellings of "cat" decode to the lexicon word
    assert mapper.hypothesis_words(["k", "a", "t"]) == reference
    assert mapper.hypothesis_words(["c", "a", "t", "|", "d", "o", "g"]) == ["cat", "dog"]
    # spellings outside the lexicon are kept as collapsed
    assert mapper.hypothesis_words(["k", "o", "t"]) == ["kot"]


def test_mapper_ignores_lexicon_without_lexicon_policy():
    token_dict = Dictionary(["|", "c", "a", "t", "k"])
    lexicon = {"cat": [["k", "a", "t"]]}
    mapper = TokenWordMapper(token_dict, separator="|", lexicon=lexicon)
    assert mapper.hypothesis_words(["k", "a", "t"]) == ["kat"]
