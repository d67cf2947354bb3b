"""
Content-addressed tile registry.
"""

from typing import Dict, List, Optional

from gbtiles.models import TileRecord


class DeduplicationIndex:
    """
    Assigns tile IDs to encoded tiles in first-seen order.

    With dedupe enabled, identical payloads share the ID (and the label) of
    their first occurrence. With dedupe disabled, every registration creates
    a new tile bank entry.
    """

    def __init__(self, enabled=True):
        self.enabled = enabled
        self.next_id = 0
        self._ids: Dict[str, int] = {}
        self._records: List[TileRecord] = []

    def __len__(self):
        return len(self._records)

    @property
    def records(self) -> List[TileRecord]:
        """Tile bank entries in the order they were first registered."""
        return list(self._records)

    def lookup(self, payload: str) -> Optional[int]:
        """Return the first ID assigned to a payload, or None if never registered."""
        return self._ids.get(payload)

    def register(self, payload: str, label: str = "") -> int:
        """
        Register an encoded tile and return its tile ID.

        Args:
            payload: Encoded tile text; the dedupe key
            label: Label stored with the entry; not part of the key

        Returns:
            Tile ID
        """
        if self.enabled and payload in self._ids:
            return self._ids[payload]

        tile_id = self.next_id
        self.next_id += 1
        self._ids.setdefault(payload, tile_id)
        self._records.append(TileRecord(id=tile_id, payload=payload, label=label))
        return tile_id
