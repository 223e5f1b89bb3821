"""
Unit tests for query tokenizer with Porter stemming.
"""

from docsearch.search.tokenizer import STOPWORDS, Token, tokenize, tokenize_with_raw


class TestTokenizer:
    """Test tokenization logic with Porter stemming applied"""

    def test_basic_tokenization(self):
        """Test the canonical stems used by Sphinx indexes"""
        assert tokenize("Neural Network Classification") == ["neural", "network", "classif"]

    def test_plural_stemming(self):
        tokens = tokenize("quantum circuits")
        assert tokens == ["quantum", "circuit"]

    def test_stopwords_removed(self):
        tokens = tokenize("how to build a circuit with qiskit")
        assert "how" not in tokens
        assert "to" not in tokens
        assert "with" not in tokens
        assert "circuit" in tokens
        assert "qiskit" in tokens

    def test_all_stopwords_yield_nothing(self):
        """Test that an all-stop-word query produces zero tokens"""
        assert tokenize("the and a") == []
        assert tokenize_with_raw("the and a") == []

    def test_empty_string(self):
        assert tokenize("") == []
        assert tokenize("   ") == []
        assert tokenize("\n\t") == []

    def test_short_tokens_dropped(self):
        """Test that single characters are dropped"""
        assert tokenize("x y z qubit") == ["qubit"]

    def test_split_on_non_word_characters(self):
        """Test punctuation, slashes and hyphens split tokens"""
        tokens = tokenize("ground-state/energy, qiskit.nature!")
        assert tokens == ["ground", "state", "energi", "qiskit", "natur"]

    def test_underscore_is_word_character(self):
        assert tokenize("qiskit_nature") == ["qiskit_natur"]

    def test_duplicates_preserved(self):
        """Test that repeated words are kept in query order"""
        assert tokenize("circuit circuits") == ["circuit", "circuit"]

    def test_lowercase_conversion(self):
        assert tokenize("QUANTUM") == ["quantum"]


class TestTokenizeWithRaw:
    """Test (raw, stem) pairs"""

    def test_raw_and_stem(self):
        tokens = tokenize_with_raw("Classifying Molecules")
        assert tokens == [
            Token(raw="classifying", stem="classifi"),
            Token(raw="molecules", stem="molecul"),
        ]

    def test_stems_match_tokenize(self):
        query = "Variational quantum eigensolver tutorials"
        assert [t.stem for t in tokenize_with_raw(query)] == tokenize(query)


class TestStopwords:
    def test_stopword_set_size(self):
        """Test the fixed English function-word list"""
        assert 80 <= len(STOPWORDS) <= 100
        assert {"the", "and", "a", "which", "if"} <= STOPWORDS
