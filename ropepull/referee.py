"""The referee process: starts players and the display, runs rounds, ends the match."""

from __future__ import annotations

import os
import random
import signal
import subprocess
import sys
import time
from typing import Iterator, Optional, Union

from .config import Config, load_config
from .game import Match, random_in_range
from .messages import TEAM_SIZE, Message, MessageType

PLAYERS = 2 * TEAM_SIZE
DISPLAY_FIFO = "fifo_opengl"


def fifo_path(directory: Union[str, os.PathLike], team_id: int, player_id: int) -> str:
    """Path of the FIFO a given player reports through."""
    return os.path.join(os.fspath(directory), f"fifo_team_{team_id}_player_{player_id}")


def _seats() -> Iterator[tuple[int, int]]:
    for index in range(PLAYERS):
        yield divmod(index, TEAM_SIZE)


def _read_exact(fd: int, size: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < size:
        chunk = os.read(fd, size - len(buffer))
        if not chunk:
            raise EOFError("player channel closed")
        buffer += chunk
    return bytes(buffer)


class _TimeUp(Exception):
    """Raised from the alarm handler when the match time runs out."""


class Referee:
    """Owns the processes and channels of one match."""

    def __init__(
        self,
        config: Config,
        config_path: Union[str, os.PathLike],
        fifo_dir: Union[str, os.PathLike] = "/tmp",
        rng: Optional[random.Random] = None,
        player_command: Optional[list[str]] = None,
        display_command: Optional[list[str]] = None,
    ) -> None:
        self.config = config
        self.config_path = os.fspath(config_path)
        self.fifo_dir = os.fspath(fifo_dir)
        self.rng = rng or random.Random()
        self.match = Match(config)
        self.player_command = player_command or [sys.executable, "-m", "ropepull.player"]
        self.display_command = display_command or [sys.executable, "-m", "ropepull.display"]
        self._read_ends: list[Optional[int]] = []
        self._write_ends: list[Optional[int]] = []
        self._fifos: list[str] = []
        self._fifo_fds: list[int] = []
        self._display_fd: Optional[int] = None
        self._display: Optional[subprocess.Popen] = None
        self._players: list[subprocess.Popen] = []
        self._terminated = False

    # -- signals -----------------------------------------------------------

    def _on_alarm(self, signum, frame) -> None:
        print("Referee: Maximum time reached", flush=True)
        print(self.match.final_result(), flush=True)
        self.match.finished = True
        raise _TimeUp

    def _on_woken(self, signum, frame) -> None:
        self.match.player_woken()

    def _signal_players(self, sig: int) -> None:
        for number, team in enumerate(self.match.teams, start=1):
            for pid in team.pids:
                try:
                    os.kill(pid, sig)
                except OSError as exc:
                    print(f"kill failed for team {number}: {exc}", file=sys.stderr)

    # -- setup -------------------------------------------------------------

    def _create_channels(self) -> None:
        for _ in range(PLAYERS):
            read_end, write_end = os.pipe()
            self._read_ends.append(read_end)
            self._write_ends.append(write_end)
        paths = [fifo_path(self.fifo_dir, team, player) for team, player in _seats()]
        paths.append(os.path.join(self.fifo_dir, DISPLAY_FIFO))
        for path in paths:
            os.mkfifo(path, 0o666)
            self._fifos.append(path)

    def _start_display(self) -> None:
        path = self._fifos[-1]
        self._display = subprocess.Popen([*self.display_command, path])
        self._display_fd = os.open(path, os.O_WRONLY)

    def _start_players(self) -> None:
        for index, (team_id, player_id) in enumerate(_seats()):
            read_end = self._read_ends[index]
            command = [
                *self.player_command,
                self.config_path,
                self._fifos[index],
                str(player_id),
                str(team_id),
                str(read_end),
            ]
            self._players.append(subprocess.Popen(command, pass_fds=(read_end,)))
            os.close(read_end)
            self._read_ends[index] = None
            self._fifo_fds.append(os.open(self._fifos[index], os.O_RDONLY))

    # -- rounds ------------------------------------------------------------

    def _receive(self, kind: MessageType) -> None:
        if self.match.finished:
            return
        efforts = []
        for index, fd in enumerate(self._fifo_fds):
            team_id, player_id = divmod(index, TEAM_SIZE)
            if self.match.fallen == (team_id, player_id):
                continue
            message = Message.unpack(_read_exact(fd, Message.SIZE))
            if message.type != kind:
                continue
            if kind == MessageType.INITIAL_ENERGY:
                self.match.set_initial_energy(
                    message.team_id, message.player_id, message.player_pid, message.value
                )
            else:
                efforts.append((message.team_id, message.player_id, message.value))
                print(
                    f"effort = {message.value} (player_id = {message.player_id}), "
                    f"team_id = {message.team_id}",
                    flush=True,
                )
        if self.match.apply_efforts(efforts) is None:
            return
        leader = self.match.leader()
        print({0: "Team 1 Won", 1: "Team 2 Won"}.get(leader, "Tie"), flush=True)
        self._send_status()

    def _send_status(self) -> None:
        for index, write_end in enumerate(self._write_ends):
            if write_end is None:
                continue
            text = self.match.status_for(index // TEAM_SIZE).encode("ascii")
            try:
                written = os.write(write_end, text)
            except OSError as exc:
                print(f"Failed to write status to player pipe: {exc}", file=sys.stderr)
                continue
            if written < len(text):
                print(f"Partial write to player {index}", file=sys.stderr)

    def _send_display(self) -> None:
        if self._display_fd is None:
            return
        try:
            os.write(self._display_fd, self.match.display_message().pack())
        except OSError as exc:
            print(f"write: {exc}", file=sys.stderr)

    def _print_teams(self) -> None:
        print("\nFinal Team Data:")
        for team in self.match.teams:
            print(f"\n=== Team {team.team_id} ===")
            print(f"Score: {team.score}")
            for player_id, energy, pid in zip(team.player_ids, team.initial_energy, team.pids):
                print(f"Player {player_id}:")
                print(f"  Initial Energy: {energy}")
                print(f"  PID: {pid}")
        sys.stdout.flush()

    def _print_lineups(self) -> None:
        if self.match.finished:
            return
        print("Sorted Energy Levels:")
        for number, (lineup, team) in enumerate(zip(self.match.lineups, self.match.teams), 1):
            print(f"Team {number}:")
            for slot in lineup:
                print(f"Player {slot.player_id} - Energy: {slot.energy}")
            print(f"Score for team {number}: {team.score}")
        sys.stdout.flush()

    def _player_fallen(self, team_id: int, player_id: int) -> None:
        print(f"player with id {player_id} in team {team_id + 1} has fallen.", flush=True)
        try:
            os.kill(self.match.teams[team_id].pids[player_id], signal.SIGALRM)
        except OSError as exc:
            print(f"kill: {exc}", file=sys.stderr)
        self.match.player_fallen(team_id, player_id)

    def _play(self) -> None:
        self._receive(MessageType.INITIAL_ENERGY)
        self._print_teams()

        self.match.load_current_energy(True)
        self._send_display()
        self._print_lineups()
        self._signal_players(signal.SIGUSR2)
        self._receive(MessageType.EFFORT)
        self.match.load_current_energy(False)
        self._send_display()
        self._print_lineups()

        timer = random_in_range(3, int(self.config.max_score / 2) + 1, self.rng)
        team_fall = random_in_range(0, 1, self.rng)
        player_fall = random_in_range(0, TEAM_SIZE - 1, self.rng)
        count = 0
        while not self.match.finished:
            if count == timer:
                self._player_fallen(team_fall, player_fall)
            winner = self.match.check_winner()
            if winner is not None:
                print(f"Team {winner + 1} has won :)", flush=True)
                break
            self._signal_players(signal.SIGUSR1)
            self._send_display()
            self._signal_players(signal.SIGUSR2)
            self._receive(MessageType.EFFORT)
            self._send_display()
            self.match.load_current_energy(False)
            self._send_display()
            self._print_lineups()
            time.sleep(1)
            count += 1

    # -- lifecycle ---------------------------------------------------------

    def run(self) -> None:
        """Play a whole match, then tear everything down."""
        previous = {
            signal.SIGUSR1: signal.signal(signal.SIGUSR1, self._on_woken),
            signal.SIGALRM: signal.signal(signal.SIGALRM, self._on_alarm),
        }
        try:
            print(f"Referee: Maximum time set to {self.config.max_time} seconds", flush=True)
            signal.alarm(self.config.max_time)
            self._create_channels()
            self._start_display()
            self._start_players()
            self._play()
        except _TimeUp:
            pass
        finally:
            signal.alarm(0)
            for sig, handler in previous.items():
                signal.signal(sig, handler)
            self.terminate()

    def terminate(self) -> None:
        """Close channels, remove FIFOs and stop every child; safe to call twice."""
        if self._terminated:
            return
        self._terminated = True
        fds = [*self._fifo_fds]
        if self._display_fd is not None:
            fds.append(self._display_fd)
        for fd in fds:
            try:
                os.close(fd)
            except OSError as exc:
                print(f"Failed to close FIFO: {exc}", file=sys.stderr)
        self._fifo_fds.clear()
        self._display_fd = None

        for path in self._fifos:
            try:
                os.unlink(path)
            except OSError as exc:
                print(f"Failed to unlink FIFO: {exc}", file=sys.stderr)
            else:
                print(f"Removed FIFO: {path}")
        self._fifos.clear()

        for index, process in enumerate(self._players):
            try:
                process.terminate()
                print(f"Killed player with PID {process.pid} from team {index // TEAM_SIZE + 1}.")
            except OSError as exc:
                print(f"Failed to kill player: {exc}", file=sys.stderr)
        if self._display is not None:
            try:
                self._display.terminate()
                print(f"Killed display with PID {self._display.pid}.")
            except OSError as exc:
                print(f"Failed to kill display: {exc}", file=sys.stderr)

        for ends in (self._write_ends, self._read_ends):
            for fd in ends:
                if fd is not None:
                    os.close(fd)
            ends.clear()

        children = [*self._players] + ([self._display] if self._display else [])
        for process in children:
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
        self.match.finished = True
        sys.stdout.flush()


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: ropepull-referee <config_file>", file=sys.stderr)
        return 1
    try:
        config = load_config(args[0])
    except OSError:
        print("Failed to load config file.", file=sys.stderr)
        return 1
    try:
        Referee(config, args[0]).run()
    except OSError as exc:
        print(f"referee: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())