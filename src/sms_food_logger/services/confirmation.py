"""Two-state confirmation machine for pending food drafts."""

from dataclasses import dataclass

from sms_food_logger.domain.conversations import ConversationEntry
from sms_food_logger.domain.nutrition import ExtractionResult, FoodEntryDraft

AFFIRMATIVE_REPLIES = frozenset({"y", "yes"})


@dataclass(frozen=True)
class NoPendingEntry:
    """Nothing awaits confirmation."""


@dataclass(frozen=True)
class PendingConfirmation:
    """A draft awaits the user's "Y"."""

    draft: FoodEntryDraft


ConfirmationState = NoPendingEntry | PendingConfirmation


@dataclass(frozen=True)
class Commit:
    """Inbound text confirms the pending draft."""

    draft: FoodEntryDraft


@dataclass(frozen=True)
class Extract:
    """Inbound text is a fresh extraction request."""


Transition = Commit | Extract


def is_affirmative(text: str) -> bool:
    """Return true for a bare "y" or "yes", ignoring case and whitespace."""
    return text.strip().lower() in AFFIRMATIVE_REPLIES


def state_of(entry: ConversationEntry) -> ConfirmationState:
    """Derive the machine state from a stored conversation."""
    if entry.pending_food_entry is None:
        return NoPendingEntry()
    return PendingConfirmation(entry.pending_food_entry)


def next_transition(state: ConfirmationState, inbound_text: str) -> Transition:
    """Decide whether inbound text commits the draft or starts a new extraction.

    An affirmative reply with no pending draft (for example after expiry) is
    ordinary text and goes to the extractor like anything else.
    """
    if isinstance(state, PendingConfirmation) and is_affirmative(inbound_text):
        return Commit(state.draft)
    return Extract()


def after_extraction(result: ExtractionResult) -> ConfirmationState:
    """Return the state that follows a fresh extraction.

    A new draft replaces any old one; a failed extraction drops it.
    """
    if result.parsed is None:
        return NoPendingEntry()
    return PendingConfirmation(result.parsed)


def apply_state(entry: ConversationEntry, state: ConfirmationState) -> ConversationEntry:
    """Return a copy of the entry reflecting the given state."""
    draft = state.draft if isinstance(state, PendingConfirmation) else None
    return entry.model_copy(update={"pending_food_entry": draft})
