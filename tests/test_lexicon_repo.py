"""
Tests for the vocabulary catalog.
"""

import pytest
from pydantic import ValidationError

from vocab import lexicon_repo
from vocab.scheduling import DuplicateItemError, ItemNotFoundError, process_review

from conftest import T0


class TestAddWord:

    def test_defaults(self, session_factory):
        entry = lexicon_repo.add_word("kat", "cat", now=T0, session_factory=session_factory)

        assert entry.id is not None
        assert entry.created_at == T0
        assert entry.stability == 0.01
        assert entry.difficulty == 4.93
        assert entry.total_reviews == 0
        assert entry.next_review_at == T0
        assert entry.accuracy is None

    def test_normalizes_whitespace(self, session_factory):
        entry = lexicon_repo.add_word("  goede   morgen ", "good morning", session_factory=session_factory)
        assert entry.word == "goede morgen"

    @pytest.mark.parametrize("word,meaning", [("", "cat"), ("kat", "   "), (None, "cat")])
    def test_blank_rejected(self, session_factory, word, meaning):
        with pytest.raises(ValidationError):
            lexicon_repo.add_word(word, meaning, session_factory=session_factory)

    def test_duplicate_rejected(self, session_factory):
        lexicon_repo.add_word("kat", "cat", session_factory=session_factory)
        with pytest.raises(DuplicateItemError):
            lexicon_repo.add_word("kat ", "cat", session_factory=session_factory)

    def test_same_word_other_meaning_allowed(self, session_factory):
        lexicon_repo.add_word("bank", "bank", session_factory=session_factory)
        lexicon_repo.add_word("bank", "sofa", session_factory=session_factory)
        assert len(lexicon_repo.list_words(session_factory=session_factory)) == 2


class TestAddWords:

    def test_skips_duplicates_and_blanks(self, session_factory):
        lexicon_repo.add_word("kat", "cat", session_factory=session_factory)

        added, skipped = lexicon_repo.add_words(
            [("hond", "dog"), ("kat", "cat"), ("", "empty"), ("hond", "dog"), ("vis", "fish")],
            now=T0,
            session_factory=session_factory,
        )

        assert [e.word for e in added] == ["hond", "vis"]
        assert len(skipped) == 3


class TestQueries:

    def test_get_word(self, session_factory):
        entry = lexicon_repo.add_word("boom", "tree", session_factory=session_factory)
        assert lexicon_repo.get_word(entry.id, session_factory=session_factory) == entry
        assert lexicon_repo.get_word(12345, session_factory=session_factory) is None

    def test_get_words_keeps_requested_order(self, session_factory):
        a = lexicon_repo.add_word("a", "1", session_factory=session_factory)
        b = lexicon_repo.add_word("b", "2", session_factory=session_factory)
        c = lexicon_repo.add_word("c", "3", session_factory=session_factory)

        entries = lexicon_repo.get_words([c.id, 999, a.id, b.id], session_factory=session_factory)
        assert [e.word for e in entries] == ["c", "a", "b"]
        assert lexicon_repo.get_words([], session_factory=session_factory) == []


class TestRenameAndDelete:

    def test_rename_keeps_review_state(self, session_factory, sql_store):
        entry = lexicon_repo.add_word("appel", "aple", now=T0, session_factory=session_factory)
        state, event = process_review(sql_store.load(entry.id), True, 1.0, timestamp=T0)
        sql_store.save(entry.id, state, event)

        renamed = lexicon_repo.rename_word(entry.id, meaning="apple", session_factory=session_factory)

        assert renamed.word == "appel"
        assert renamed.meaning == "apple"
        assert renamed.total_reviews == 1

    def test_rename_missing(self, session_factory):
        with pytest.raises(ItemNotFoundError):
            lexicon_repo.rename_word(7, word="x", session_factory=session_factory)

    def test_rename_collision(self, session_factory):
        lexicon_repo.add_word("kat", "cat", session_factory=session_factory)
        other = lexicon_repo.add_word("poes", "cat", session_factory=session_factory)
        with pytest.raises(DuplicateItemError):
            lexicon_repo.rename_word(other.id, word="kat", session_factory=session_factory)

    def test_delete_removes_history(self, session_factory, sql_store):
        entry = lexicon_repo.add_word("weg", "gone", now=T0, session_factory=session_factory)
        state, event = process_review(sql_store.load(entry.id), True, 1.0, timestamp=T0)
        sql_store.save(entry.id, state, event)

        lexicon_repo.delete_word(entry.id, session_factory=session_factory)

        assert lexicon_repo.get_word(entry.id, session_factory=session_factory) is None
        assert sql_store.recent_events() == []
        with pytest.raises(ItemNotFoundError):
            lexicon_repo.delete_word(entry.id, session_factory=session_factory)
