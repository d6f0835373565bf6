import pytest

from emission_eval.utils.dictionary import (
    UNK_TOKEN,
    Dictionary,
    create_token_dict,
    create_word_dict,
    load_lexicon,
)
from emission_eval.utils.errors import ConfigurationError, UnknownIndexError


def test_dictionary_lookups():
    d = Dictionary(["a", "b"])
    d.add_entry("A", d.get_index("a"))

    assert d.index_size() == 2
    assert d.entry_size() == 3
    assert d.get_index("A") == 0
    assert d.get_entry(0) == "a"
    assert "b" in d
    with pytest.raises(UnknownIndexError):
        d.get_entry(5)
    with pytest.raises(UnknownIndexError):
        d.get_index("z")


def test_create_token_dict(tmp_path):
    tokens_file = tmp_path / "tokens.txt"
    tokens_file.write_text("|\na A\nb\n\nc\n", encoding="utf-8")

    token_dict = create_token_dict(tokens_file)
    assert token_dict.index_size() == 4
    assert token_dict.get_index("A") == token_dict.get_index("a") == 1
    assert token_dict.get_entry(3) == "c"


def test_create_token_dict_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        create_token_dict(tmp_path / "missing.txt")


def test_lexicon_and_word_dict(tmp_path):
    lexicon_file = tmp_path / "lexicon.txt"
    lexicon_file.write_text(
        "cat c a t\ncat k a t\ndog d o g\nowl o w l\n", encoding="utf-8"
    )

    lexicon = load_lexicon(lexicon_file)
    assert lexicon["cat"] == [["c", "a", "t"], ["k", "a", "t"]]
    assert list(lexicon) == ["cat", "dog", "owl"]

    assert list(load_lexicon(lexicon_file, max_word=2)) == ["cat", "dog"]

    word_dict = create_word_dict(lexicon)
    assert word_dict.get_entry(word_dict.get_index("dog")) == "dog"
    assert word_dict.get_index("zebra") == word_dict.get_index(UNK_TOKEN)


def test_lexicon_without_spelling(tmp_path):
    lexicon_file = tmp_path / "lexicon.txt"
    lexicon_file.write_text("cat c a t\ndog\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_lexicon(lexicon_file)
