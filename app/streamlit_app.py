"""
Vocabulary Trainer - Main App

Streamlit UI for the review scheduler: study the due batch, add words.

Run with:
    streamlit run app/streamlit_app.py
"""

import streamlit as st
from pydantic import ValidationError

from vocab import config, lexicon_repo
from vocab.scheduler import start_session, submit_answer
from vocab.scheduling import DuplicateItemError, SqlReviewStore, from_millis, init_db


# ---- Page Setup ----

st.set_page_config(
    page_title="Vocabulary Trainer",
    page_icon="📚",
    layout="centered"
)


# ---- Database Initialization ----

@st.cache_resource
def _init_database():
    """Initialize logging and database schema (runs once per server)."""
    config.configure_logging()
    init_db()


_init_database()


# ---- Session State Initialization ----

def _init_session_state():
    """Initialize all session state variables."""
    if "session_batch" not in st.session_state:
        st.session_state.session_batch = []
    if "session_position" not in st.session_state:
        st.session_state.session_position = 0
    if "show_answer" not in st.session_state:
        st.session_state.show_answer = False
    if "session_count" not in st.session_state:
        st.session_state.session_count = 0
    if "session_correct" not in st.session_state:
        st.session_state.session_correct = 0
    if "next_poll_at" not in st.session_state:
        st.session_state.next_poll_at = None


_init_session_state()


# ---- Actions ----

def _start_new_session():
    batch = start_session(SqlReviewStore())
    st.session_state.session_batch = batch.entries
    st.session_state.session_position = 0
    st.session_state.show_answer = False
    st.session_state.session_count = 0
    st.session_state.session_correct = 0
    st.session_state.next_poll_at = batch.next_poll_at


def _record(correct: bool, confidence: float):
    entry = st.session_state.session_batch[st.session_state.session_position]
    submit_answer(SqlReviewStore(), entry.id, correct, confidence)

    st.session_state.session_count += 1
    if correct:
        st.session_state.session_correct += 1
    st.session_state.session_position += 1
    st.session_state.show_answer = False


# ---- Sidebar: add words ----

with st.sidebar:
    st.header("Add a word")
    with st.form("add_word", clear_on_submit=True):
        new_word = st.text_input("Word")
        new_meaning = st.text_input("Meaning")
        if st.form_submit_button("Add"):
            try:
                lexicon_repo.add_word(new_word, new_meaning)
                st.success(f"Added '{new_word.strip()}'")
            except ValidationError:
                st.error("Word and meaning must not be empty.")
            except DuplicateItemError:
                st.warning("That word is already in the list.")

    if config.is_test_mode():
        st.warning("⚠️ **TEST MODE** - Using the test database")


# ---- Study Flow ----

st.title("📚 Vocabulary Trainer")

batch = st.session_state.session_batch
position = st.session_state.session_position

if position >= len(batch):
    if st.session_state.session_count > 0:
        st.success(
            f"Session complete: {st.session_state.session_correct}/"
            f"{st.session_state.session_count} correct"
        )
    elif st.session_state.next_poll_at is not None and not batch:
        next_due = from_millis(st.session_state.next_poll_at)
        st.info(f"Nothing is due right now. Check back after {next_due:%H:%M} UTC.")

    if st.button("Start session", type="primary", use_container_width=True):
        _start_new_session()
        st.rerun()
else:
    entry = batch[position]
    st.caption(f"Word {position + 1} of {len(batch)}")
    st.markdown(f"## {entry.word}")

    if not st.session_state.show_answer:
        if st.button("Show meaning", use_container_width=True):
            st.session_state.show_answer = True
            st.rerun()
    else:
        st.markdown(f"### {entry.meaning}")
        confidence = st.slider("How sure were you?", 0.0, 1.0, 1.0, 0.05)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("✅ Correct", type="primary", use_container_width=True):
                _record(True, confidence)
                st.rerun()
        with col2:
            if st.button("❌ Incorrect", use_container_width=True):
                _record(False, confidence)
                st.rerun()
