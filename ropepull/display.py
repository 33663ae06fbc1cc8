"""Window that shows the rope, both line-ups, the scores and the clock."""

from __future__ import annotations

import math
import os
import queue
import sys
import threading
import time
from typing import Callable, Optional, Sequence

from .messages import TEAM_SIZE, DisplayMessage

SCREEN_WIDTH = 800
SCREEN_HEIGHT = 600
PLAYER_RADIUS = 25
BOX_HEIGHT = 50
CHAR_WIDTH = 8
FRAME_RATE = 60

ROPE_HALF_LENGTH = 300
SLOT_MARGIN = 150
SLOT_SPACING = 70

TEAM_NAMES = (
    ("Ava", "Ben", "Cal", "Dan"),
    ("Eve", "Fay", "Gus", "Hal"),
)
REFEREE_NAME = "Referee"

TEAM_1_WIN = "Team 1 Win "
TEAM_2_WIN = "Team 2 Win"

_WHITE = (255, 255, 255)
_BLACK = (0, 0, 0)
_GREY = (179, 179, 179)
_RED = (255, 0, 0)
_GREEN = (0, 255, 0)
_BLUE = (0, 0, 255)


def player_slots(side: int) -> list[int]:
    """Horizontal centre of each line-up position for a side (0 left, 1 right).

    Position 0 is nearest the middle of the rope; the last position is at the edge.
    """
    if side not in (0, 1):
        raise ValueError(f"side must be 0 or 1, got {side}")
    offsets = [(TEAM_SIZE - 1 - position) * SLOT_SPACING for position in range(TEAM_SIZE)]
    if side == 0:
        return [SLOT_MARGIN + offset for offset in offsets]
    return [SCREEN_WIDTH - SLOT_MARGIN - offset for offset in offsets]


def centered_text_x(x: int, text: str) -> int:
    """Left edge that centres text on x, assuming a fixed character width."""
    return int(x) - (len(text) * CHAR_WIDTH) // 2


def player_name(side: int, player_id: int) -> str:
    """Display name of a player, falling back to its number when unknown."""
    names = TEAM_NAMES[side]
    if 0 <= player_id < len(names):
        return names[player_id]
    return str(player_id)


class Scoreboard:
    """Scores, clock and the winner banner derived from successive snapshots."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self.start_time = clock()
        self.previous_1 = 0
        self.previous_2 = 0
        self.team_win = 0
        self.message: Optional[DisplayMessage] = None

    def update(self, message: DisplayMessage) -> None:
        """Take in a new snapshot and note which team's score last moved."""
        if self.previous_1 != message.score_1 and self.previous_1 != 0:
            self.team_win = 1
        elif self.previous_2 != message.score_2 and self.previous_1 != 0:
            self.team_win = 2
        self.previous_1 = message.score_1
        self.previous_2 = message.score_2
        self.message = message

    def banner(self) -> str:
        return TEAM_1_WIN if self.team_win == 1 else TEAM_2_WIN

    def banner_x(self) -> int:
        return 100 if self.team_win == 1 else SCREEN_WIDTH - 240

    @property
    def elapsed(self) -> int:
        return int(self._clock() - self.start_time)

    def time_text(self) -> str:
        return f"Time: {self.elapsed} s"

    def score_texts(self) -> tuple[str, str]:
        return (
            f"Score Team 1: {self.previous_1}",
            f"Score Team 2: {self.previous_2}",
        )


def _read_exact(fd: int, size: int) -> Optional[bytes]:
    buffer = bytearray()
    while len(buffer) < size:
        chunk = os.read(fd, size - len(buffer))
        if not chunk:
            return None
        buffer += chunk
    return bytes(buffer)


def _reader(path: str, inbox: "queue.Queue[DisplayMessage]") -> None:
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError as exc:
        print(f"open failed for FIFO: {exc}", file=sys.stderr)
        return
    try:
        while True:
            data = _read_exact(fd, DisplayMessage.SIZE)
            if data is None:
                return
            inbox.put(DisplayMessage.unpack(data))
    except OSError as exc:
        print(f"read failed from FIFO: {exc}", file=sys.stderr)
    finally:
        os.close(fd)


class _Renderer:
    """Draws a frame with pygame, using bottom-left based coordinates."""

    def __init__(self, surface) -> None:
        import pygame

        self.pg = pygame
        self.surface = surface
        self.font = pygame.font.Font(None, 24)

    @staticmethod
    def _y(y: float) -> int:
        return int(SCREEN_HEIGHT - y)

    def text(self, x: int, y: int, text: str) -> None:
        rendered = self.font.render(text, True, _BLACK)
        self.surface.blit(rendered, (x, self._y(y) - self.font.get_ascent()))

    def box(self, x: int, y: int, width: int, height: int) -> None:
        rect = self.pg.Rect(x, self._y(y), width, height)
        self.pg.draw.rect(self.surface, _GREY, rect)
        self.pg.draw.rect(self.surface, _BLACK, rect, 2)

    def circle(self, cx: float, cy: float, radius: float, colour) -> None:
        self.pg.draw.circle(self.surface, colour, (int(cx), self._y(cy)), int(radius))

    def face(self, cx: float, cy: float) -> None:
        self.circle(cx - 7, cy + 7, 5, _BLACK)
        self.circle(cx + 7, cy + 7, 5, _BLACK)
        for start, end in (((cx - 10, cy + 18), (cx - 5, cy + 13)),
                           ((cx + 5, cy + 13), (cx + 10, cy + 18))):
            self.pg.draw.line(
                self.surface, _BLACK,
                (int(start[0]), self._y(start[1])), (int(end[0]), self._y(end[1])),
            )

    def figure(self, x: int, y: float, colour, name: str) -> None:
        self.circle(x, y, PLAYER_RADIUS, colour)
        self.face(x, y)
        self.text(centered_text_x(x, name), int(y - PLAYER_RADIUS - 20), name)

    def player(self, x: int, y: float, colour, name: str, effort: int) -> None:
        self.figure(x, y, colour, name)
        box_y = int(y + PLAYER_RADIUS + 30)
        self.box(x - 20, box_y + 20, 40, 20)
        label = str(effort)
        self.text(centered_text_x(x, label), box_y + 5, label)

    def rope(self, centre: int) -> None:
        y = self._y(SCREEN_HEIGHT // 2)
        self.pg.draw.line(
            self.surface, _GREEN,
            (centre - ROPE_HALF_LENGTH, y), (centre + ROPE_HALF_LENGTH, y), 10,
        )

    def frame(self, board: Scoreboard) -> None:
        self.surface.fill(_WHITE)
        message = board.message
        if message is None:
            return
        self.rope(SCREEN_WIDTH // 2)

        score_1, score_2 = board.score_texts()
        self.box(90, SCREEN_HEIGHT - 140, 180, 40)
        self.text(100, SCREEN_HEIGHT - 160, score_1)
        self.box(SCREEN_WIDTH - 250, SCREEN_HEIGHT - 140, 180, 40)
        self.text(SCREEN_WIDTH - 240, SCREEN_HEIGHT - 160, score_2)

        self.box(SCREEN_WIDTH - 120, SCREEN_HEIGHT - 20, 100, 40)
        self.text(SCREEN_WIDTH - 110, SCREEN_HEIGHT - 40, board.time_text())

        teams: Sequence[tuple[int, Sequence[int], Sequence[int], tuple]] = (
            (0, message.energies_1, message.ids_1, _RED),
            (1, message.energies_2, message.ids_2, _BLUE),
        )
        for side, energies, ids, colour in teams:
            for x, energy, player_id in zip(player_slots(side), energies, ids):
                self.player(x, SCREEN_HEIGHT / 2, colour, player_name(side, player_id), energy)

        self.text(board.banner_x(), SCREEN_HEIGHT - 200, board.banner())
        self.figure(SCREEN_WIDTH // 2, SCREEN_HEIGHT - 100, _GREEN, REFEREE_NAME)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: ropepull-display <fifo>", file=sys.stderr)
        return 1

    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    import pygame

    inbox: "queue.Queue[DisplayMessage]" = queue.Queue()
    threading.Thread(target=_reader, args=(args[0], inbox), daemon=True).start()

    pygame.init()
    try:
        surface = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Rope Pulling Game")
        renderer = _Renderer(surface)
        board = Scoreboard()
        ticker = pygame.time.Clock()
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
            while True:
                try:
                    board.update(inbox.get_nowait())
                except queue.Empty:
                    break
            renderer.frame(board)
            pygame.display.flip()
            ticker.tick(FRAME_RATE)
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())