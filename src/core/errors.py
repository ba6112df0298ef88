"""Exception hierarchy for match compaction and reference catalog loading.

Recoverable telemetry gaps never raise; they degrade to a skipped record or a
fallback label. The errors below terminate compaction for one match so the
caller can skip or report it instead of forwarding a partial narrative.
"""

from __future__ import annotations


# ========================================================================
# Compaction
# ========================================================================


class CompactionError(Exception):
    """Base exception for match compaction failures."""

    pass


class MissingMatchDataError(CompactionError):
    """Raised when a mandatory top-level structure is absent from the match."""

    def __init__(self, field: str, detail: str | None = None) -> None:
        self.field = field
        message = f"Match telemetry is missing mandatory field '{field}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class IncompleteTelemetryError(CompactionError):
    """Raised when a participant lacks an entire log category.

    Individual malformed records are skipped; a whole missing category would
    silently drop a section of the narrative, so it is fatal instead.
    """

    def __init__(self, field: str, player_slot: int | None) -> None:
        self.field = field
        self.player_slot = player_slot
        super().__init__(
            f"Participant in slot {player_slot} has no '{field}' "
            "(match is probably not parsed yet)"
        )


class FocusPlayerNotFoundError(CompactionError):
    """Raised when the requested focus account is not a participant."""

    def __init__(self, account_id: int) -> None:
        self.account_id = account_id
        super().__init__(f"Focus account {account_id} did not play in this match")


# ========================================================================
# Reference catalog
# ========================================================================


class CatalogError(Exception):
    """Raised when the reference catalog cannot be loaded."""

    pass


class CatalogVersionError(CatalogError):
    """Raised when the catalog file version differs from the pinned version."""

    def __init__(self, found: str, expected: str) -> None:
        self.found = found
        self.expected = expected
        super().__init__(
            f"Catalog data version mismatch: file={found}, expected={expected}. "
            "Please update assets or settings."
        )
