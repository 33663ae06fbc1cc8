"""Wire records exchanged between the referee, the players and the display."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Sequence, Union

TEAM_SIZE = 4
CONTENT_SIZE = 20

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class MessageType(IntEnum):
    """Kinds of message a player sends to the referee."""

    READY_TO_PLAY = 0
    JUMP_START = 1
    PULL_START = 2
    JUMP_END = 3
    PULL_END = 4
    ENERGY = 5
    INITIAL_ENERGY = 1
    EFFORT = 2


def _as_type(value: int) -> Union[MessageType, int]:
    try:
        return MessageType(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class Message:
    """A player's report: its identity and a short numeric text payload."""

    type: int
    player_id: int
    player_pid: int
    team_id: int
    content: str = ""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"=iiii{CONTENT_SIZE}s")
    SIZE: ClassVar[int] = _FORMAT.size

    @property
    def value(self) -> int:
        """The leading integer of the content, or 0 when there is none."""
        match = _LEADING_INT.match(self.content)
        return int(match.group(1)) if match else 0

    def pack(self) -> bytes:
        raw = self.content.encode("ascii", errors="replace")[: CONTENT_SIZE - 1]
        return self._FORMAT.pack(
            int(self.type), self.player_id, self.player_pid, self.team_id, raw
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Message":
        if len(data) != cls.SIZE:
            raise ValueError(f"message must be {cls.SIZE} bytes, got {len(data)}")
        kind, player_id, pid, team_id, raw = cls._FORMAT.unpack(data)
        content = raw.split(b"\0", 1)[0].decode("ascii", errors="replace")
        return cls(_as_type(kind), player_id, pid, team_id, content)


@dataclass(frozen=True)
class DisplayMessage:
    """Snapshot of both line-ups and scores sent to the display."""

    energies_1: Sequence[int]
    ids_1: Sequence[int]
    energies_2: Sequence[int]
    ids_2: Sequence[int]
    score_1: int = 0
    score_2: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"={4 * TEAM_SIZE + 2}i")
    SIZE: ClassVar[int] = _FORMAT.size

    def __post_init__(self) -> None:
        for name in ("energies_1", "ids_1", "energies_2", "ids_2"):
            values = tuple(int(v) for v in getattr(self, name))
            if len(values) != TEAM_SIZE:
                raise ValueError(f"{name} must hold {TEAM_SIZE} values")
            object.__setattr__(self, name, values)

    def pack(self) -> bytes:
        return self._FORMAT.pack(
            *self.energies_1,
            *self.ids_1,
            *self.energies_2,
            *self.ids_2,
            self.score_1,
            self.score_2,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "DisplayMessage":
        if len(data) != cls.SIZE:
            raise ValueError(f"message must be {cls.SIZE} bytes, got {len(data)}")
        values = cls._FORMAT.unpack(data)
        rows = [values[i : i + TEAM_SIZE] for i in range(0, 4 * TEAM_SIZE, TEAM_SIZE)]
        return cls(rows[0], rows[1], rows[2], rows[3], values[-2], values[-1])