"""
Streamlit page for deckdraw.

This module renders a deck session in the browser: DRAW and SHUFFLE DECK
buttons enabled from the snapshot, the drawn cards as images in draw order,
and a table and chart of the draw history.

Run with ``streamlit run deckdraw/ui/deck_ui.py``.
"""

from typing import Any, Dict, List, Optional

import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from deckdraw.api import DeckSession
from deckdraw.state import SessionSnapshot, SessionStatus

# Number of card images per row
CARDS_PER_ROW = 6

SUIT_NAMES = {"S": "SPADES", "H": "HEARTS", "D": "DIAMONDS", "C": "CLUBS"}


def history_frame(snapshot: SessionSnapshot) -> pd.DataFrame:
    """
    Tabulate the drawn cards.

    Args:
        snapshot: Session snapshot

    Returns:
        DataFrame with one row per drawn card, in draw order
    """
    rows = [
        {
            "draw": i + 1,
            "code": card.id,
            "label": card.label,
            "suit": SUIT_NAMES.get(card.id[-1:], "OTHER"),
        }
        for i, card in enumerate(snapshot.history)
    ]
    return pd.DataFrame(rows, columns=["draw", "code", "label", "suit"])


def card_rows(snapshot: SessionSnapshot, per_row: int = CARDS_PER_ROW) -> List[list]:
    """Split the history into rows for a grid layout."""
    history = list(snapshot.history)
    return [history[i : i + per_row] for i in range(0, len(history), per_row)]


def suit_counts(frame: pd.DataFrame) -> pd.Series:
    """Count drawn cards per suit, every suit present even at zero."""
    counts = frame["suit"].value_counts()
    return counts.reindex(list(SUIT_NAMES.values()), fill_value=0)


class DeckUI:
    """
    Streamlit UI for one deck session.

    The session lives in ``st.session_state`` so it survives Streamlit's
    script reruns; it is driven through its synchronous wrappers.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the DeckUI.

        Args:
            config: Session configuration overrides
        """
        if "deck_session" not in st.session_state:
            st.session_state.deck_session = DeckSession(config=config)
            st.session_state.deck_session.initialize_sync()

        self.session: DeckSession = st.session_state.deck_session

    def render(self) -> None:
        """Render the page from the current snapshot."""
        snapshot = self.session.current_snapshot()

        st.title("Deck of Cards")
        self._render_controls(snapshot)
        self._render_notices(snapshot)
        self._render_cards(snapshot)
        self._render_history(snapshot)

    def _render_controls(self, snapshot: SessionSnapshot) -> None:
        draw_col, shuffle_col, retry_col = st.columns(3)

        if draw_col.button("DRAW", disabled=not snapshot.can_draw):
            with st.spinner("Drawing..."):
                self.session.draw_sync()
            st.rerun()

        if shuffle_col.button("SHUFFLE DECK", disabled=not snapshot.can_shuffle):
            with st.spinner("Shuffling..."):
                self.session.reshuffle_sync()
            st.rerun()

        # Only a failed initialize leaves nothing else to press
        failed_setup = snapshot.status is SessionStatus.FAILED and not (
            snapshot.can_draw or snapshot.can_shuffle
        )
        if failed_setup and retry_col.button("RETRY"):
            with st.spinner("Creating deck..."):
                self.session.initialize_sync()
            st.rerun()

    def _render_notices(self, snapshot: SessionSnapshot) -> None:
        if snapshot.deck_id:
            st.caption(f"Deck {snapshot.deck_id} - {snapshot.remaining} cards remaining")
        if snapshot.status is SessionStatus.EXHAUSTED:
            st.info("Deck empty! Shuffle to start over.")
        if snapshot.last_error:
            st.warning(snapshot.last_error)

    def _render_cards(self, snapshot: SessionSnapshot) -> None:
        for row in card_rows(snapshot):
            columns = st.columns(CARDS_PER_ROW)
            for column, card in zip(columns, row):
                if card.image_ref:
                    column.image(card.image_ref, caption=card.label)
                else:
                    column.write(card.label)

    def _render_history(self, snapshot: SessionSnapshot) -> None:
        if not snapshot.history:
            return

        frame = history_frame(snapshot)
        with st.expander("Draw history"):
            st.dataframe(frame, hide_index=True)

            fig, ax = plt.subplots(figsize=(6, 3))
            suit_counts(frame).plot.bar(ax=ax)
            ax.set_ylabel("Cards drawn")
            ax.set_title("Suits drawn")
            st.pyplot(fig)
            plt.close(fig)


def run_streamlit_app() -> None:
    """Entry point for ``streamlit run``."""
    st.set_page_config(page_title="Deck of Cards", layout="wide")
    DeckUI().render()


if __name__ == "__main__":
    run_streamlit_app()
