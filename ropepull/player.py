"""A single puller: reports its energy and effort to the referee over a FIFO."""

from __future__ import annotations

import os
import random
import signal
import sys
import time
from typing import Optional, Union

from .config import Config, load_config
from .game import random_in_range
from .messages import Message, MessageType

STATUS_READ_SIZE = 8

_USAGE = "Usage: ropepull-player <config> <fifo> <player_id> <team_id> <pipe_fd>"


class Player:
    """One team member, driven by the referee's signals."""

    def __init__(
        self,
        config: Config,
        player_id: int,
        team_id: int,
        fifo: Union[str, os.PathLike],
        status_fd: int,
        rng: Optional[random.Random] = None,
        parent_pid: Optional[int] = None,
    ) -> None:
        self.config = config
        self.player_id = player_id
        self.team_id = team_id
        self.fifo = fifo
        self.status_fd = status_fd
        self.rng = rng or random.Random()
        self.parent_pid = os.getppid() if parent_pid is None else parent_pid
        self._out: Optional[int] = None

    def generate_energy(self) -> int:
        """Pick a starting energy from this player's configured range."""
        return random_in_range(
            self.config.initial_energy_min[self.player_id],
            self.config.initial_energy_max[self.player_id],
            self.rng,
        )

    def make_effort(self) -> int:
        """Pick the effort spent in one pull."""
        return random_in_range(
            self.config.rate_of_decrease_min, self.config.rate_of_decrease_max, self.rng
        )

    def rejoin_delay(self) -> int:
        """Pick how many seconds a fallen player stays down."""
        return random_in_range(
            self.config.re_join_time_min, self.config.re_join_time_max, self.rng
        )

    def _send(self, kind: MessageType, value: int) -> None:
        message = Message(kind, self.player_id, os.getpid(), self.team_id, str(value))
        try:
            os.write(self._out, message.pack())
        except OSError as exc:
            print(f"write: {exc}", file=sys.stderr)

    def _on_start_game(self, signum, frame) -> None:
        effort = self.make_effort()
        print(
            f"player {os.getpid()} player_id {self.player_id} "
            f"team_id {self.team_id} make effort = {effort}",
            flush=True,
        )
        self._send(MessageType.EFFORT, effort)

    def _on_fall(self, signum, frame) -> None:
        delay = self.rejoin_delay()
        held = {signal.SIGUSR1, signal.SIGUSR2}
        signal.pthread_sigmask(signal.SIG_BLOCK, held)
        try:
            time.sleep(delay)
        finally:
            signal.pthread_sigmask(signal.SIG_UNBLOCK, held)
        try:
            os.kill(self.parent_pid, signal.SIGUSR1)
        except OSError as exc:
            print(f"kill: {exc}", file=sys.stderr)

    def _listen(self) -> None:
        while True:
            data = os.read(self.status_fd, STATUS_READ_SIZE)
            if not data:
                return
            status = data.decode("ascii", errors="replace")
            print(
                f"player {self.player_id} in team {self.team_id + 1} is a {status}",
                flush=True,
            )

    def run(self) -> None:
        """Report initial energy, then answer signals until stopped or the referee leaves."""
        try:
            self._out = os.open(self.fifo, os.O_WRONLY)
            try:
                self._send(MessageType.INITIAL_ENERGY, self.generate_energy())
                # The get-ready signal only lines players up on the display,
                # so a player simply ignores it.
                handlers = {
                    signal.SIGALRM: self._on_fall,
                    signal.SIGUSR1: signal.SIG_IGN,
                    signal.SIGUSR2: self._on_start_game,
                    signal.SIGINT: signal.default_int_handler,
                }
                previous = {sig: signal.signal(sig, handler) for sig, handler in handlers.items()}
                try:
                    self._listen()
                except KeyboardInterrupt:
                    pass
                finally:
                    for sig, handler in previous.items():
                        signal.signal(sig, handler)
            finally:
                os.close(self._out)
                self._out = None
        finally:
            os.close(self.status_fd)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 5:
        print(_USAGE, file=sys.stderr)
        return 1
    try:
        player_id, team_id, pipe_fd = (int(arg) for arg in args[2:5])
    except ValueError:
        print(_USAGE, file=sys.stderr)
        return 1
    try:
        config = load_config(args[0])
    except OSError:
        print("Failed to load config file.", file=sys.stderr)
        return 1
    player = Player(config, player_id, team_id, args[1], pipe_fd)
    try:
        player.run()
    except OSError as exc:
        print(f"open: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())