from __future__ import annotations

from dataclasses import dataclass

from eventdrop.db.models.event import MODERATION_APPROVED, MODERATION_PENDING, MODERATION_REJECTED


@dataclass(frozen=True)
class ModerationOutcome:
    status: str
    notes: str | None
    notify: bool


def arbitrate(
    previous: str | None,
    proposed: str,
    *,
    notes: str | None = None,
    moderation_warning: str | None = None,
) -> ModerationOutcome:
    """Merge the screening disposition with what extraction surfaced.

    ``previous`` is the status already stored for the draft (``None`` when the
    submission has not been announced to reviewers yet). A warning from
    extraction always forces review; ``rejected`` is never lifted here.
    ``notify`` is set only on a transition into ``pending``.
    """
    if proposed == MODERATION_REJECTED or previous == MODERATION_REJECTED:
        return ModerationOutcome(status=MODERATION_REJECTED, notes=notes, notify=False)

    warning = (moderation_warning or "").strip()
    if warning:
        status = MODERATION_PENDING
        notes = warning
    elif proposed == MODERATION_PENDING:
        status = MODERATION_PENDING
    else:
        status = MODERATION_APPROVED

    return ModerationOutcome(
        status=status,
        notes=notes,
        notify=status == MODERATION_PENDING and previous != MODERATION_PENDING,
    )
