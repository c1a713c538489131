from __future__ import annotations

from collections.abc import Iterable

from qrhunt.ledger import ScanLedger
from qrhunt.models import HighScoreEntry, ScanEvent


def highscores(events: Iterable[ScanEvent]) -> list[HighScoreEntry]:
    """Per-group totals, highest first.

    Totals come only from the points snapshotted on each event. Ties keep the order
    in which each group first appears in the ledger (list.sort is stable, also with
    reverse=True).
    """

    totals: dict[str, int] = {}
    for event in events:
        totals[event.group_name] = totals.get(event.group_name, 0) + event.points

    entries = [HighScoreEntry(name=name, points=points) for name, points in totals.items()]
    entries.sort(key=lambda e: e.points, reverse=True)
    return entries


class ScoreAggregator:
    def __init__(self, *, ledger: ScanLedger) -> None:
        self._ledger = ledger

    def highscores(self) -> list[HighScoreEntry]:
        return highscores(self._ledger.events())
