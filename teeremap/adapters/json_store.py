"""
Tee sheet store backed by a JSON snapshot file.

Writes go to a temporary file next to the target which then replaces it,
so the file on disk is either the old or the new tee sheet, never a mix.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

import pendulum

from ..domain.exceptions import PersistenceError
from ..domain.models import (
    DEFAULT_CAPACITY,
    Fill,
    Guest,
    Member,
    Occupant,
    OccupantKind,
    SourceSlot,
    Teesheet,
)
from .memory_store import InMemoryScheduleStore

logger = logging.getLogger(__name__)


def occupant_from_dict(data: Dict[str, Any], slot_id: int) -> Occupant:
    """Build an occupant variant from its JSON representation."""
    kind = OccupantKind(data.get("kind", OccupantKind.MEMBER.value))

    if kind is OccupantKind.GUEST:
        return Guest(
            id=int(data["id"]),
            display_name=data.get("display_name", ""),
            origin_slot_id=slot_id,
            inviting_occupant_id=data.get("inviting_occupant_id"),
        )

    if kind is OccupantKind.FILL:
        fill_kind = data.get("fill_kind") or "unknown"
        custom_label = data.get("custom_label")
        return Fill(
            id=int(data["id"]),
            display_name=data.get("display_name") or Fill.label_for(fill_kind, custom_label),
            origin_slot_id=slot_id,
            fill_kind=fill_kind,
            custom_label=custom_label,
        )

    return Member(id=int(data["id"]), display_name=data.get("display_name", ""), origin_slot_id=slot_id)


def occupant_to_dict(occupant: Occupant) -> Dict[str, Any]:
    """Serialize an occupant, keeping only the fields of its variant."""
    data: Dict[str, Any] = {
        "id": occupant.id,
        "kind": occupant.kind.value,
        "display_name": occupant.display_name,
    }
    if isinstance(occupant, Guest):
        data["inviting_occupant_id"] = occupant.inviting_occupant_id
    elif isinstance(occupant, Fill):
        data["fill_kind"] = occupant.fill_kind
        data["custom_label"] = occupant.custom_label
    return data


def teesheet_from_dict(data: Dict[str, Any]) -> Teesheet:
    """
    Build a tee sheet from its JSON representation.

    Raises:
        KeyError, ValueError, TypeError: If the data is malformed
    """
    slots = []
    for index, raw_slot in enumerate(data.get("slots", [])):
        slot_id = int(raw_slot["id"])
        slots.append(
            SourceSlot(
                id=slot_id,
                start_time=str(raw_slot["start_time"]),
                capacity=int(raw_slot.get("capacity", DEFAULT_CAPACITY)),
                occupants=tuple(occupant_from_dict(o, slot_id) for o in raw_slot.get("occupants", [])),
                display_name=raw_slot.get("display_name"),
                sort_order=int(raw_slot.get("sort_order", index)),
            )
        )

    slots.sort(key=lambda s: s.sort_order)

    return Teesheet(
        date=pendulum.from_format(data["date"], "YYYY-MM-DD").date(),
        version=int(data.get("version", 0)),
        slots=tuple(slots),
    )


def teesheet_to_dict(teesheet: Teesheet) -> Dict[str, Any]:
    """Serialize a tee sheet to plain JSON types."""
    return {
        "date": teesheet.date.isoformat(),
        "version": teesheet.version,
        "slots": [
            {
                "id": slot.id,
                "start_time": slot.start_time,
                "capacity": slot.capacity,
                "display_name": slot.display_name,
                "sort_order": slot.sort_order,
                "occupants": [occupant_to_dict(o) for o in slot.occupants],
            }
            for slot in teesheet.slots
        ],
    }


class JsonScheduleStore(InMemoryScheduleStore):
    """
    Schedule store persisting one tee sheet as a JSON file.

    The file is re-read before every change, so a change made by another
    process in the meantime is detected by the version check.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: Path to the tee sheet JSON file

        Raises:
            PersistenceError: If the file is missing or malformed
        """
        self.path = Path(path)
        super().__init__(self._read())

    @classmethod
    def create(cls, path: Path, teesheet: Teesheet) -> "JsonScheduleStore":
        """Write ``teesheet`` to a new file at ``path`` and open it."""
        _write_atomically(Path(path), teesheet_to_dict(teesheet))
        return cls(path)

    def _read(self) -> Teesheet:
        if not self.path.exists():
            raise PersistenceError(f"Tee sheet file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return teesheet_from_dict(data)
        except OSError as exc:
            raise PersistenceError(f"Could not read tee sheet file {self.path}: {exc}") from exc
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            raise PersistenceError(f"Malformed tee sheet file {self.path}: {exc}") from exc

    def _current(self) -> Teesheet:
        self._teesheet = self._read()
        return self._teesheet

    def _commit(self, teesheet: Teesheet) -> None:
        _write_atomically(self.path, teesheet_to_dict(teesheet))
        super()._commit(teesheet)


def _write_atomically(path: Path, data: Dict[str, Any]) -> None:
    """Write JSON data to ``path`` through a temporary file."""
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            json.dump(data, tmp, indent=2)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        logger.warning("Could not save tee sheet to %s: %s", path, exc)
        raise PersistenceError(f"Could not save tee sheet to {path}: {exc}") from exc
