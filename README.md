# ropepull

A tug-of-war simulation. It runs as a group of cooperating processes on a
POSIX system.

- The **referee** loads a configuration file. It starts eight player
  processes, four per team, and a scoreboard window. Then it runs the match
  round by round.
- Each **player** first reports a random initial energy. After that it answers
  every round with a random effort.
- The **display** is a `pygame` window. It draws the rope, both teams, the
  scores and the elapsed time.

The processes talk over named pipes (FIFOs) and Unix signals, so the package
needs a POSIX system. The display also needs a graphical session.

## Installation

```
pip install .
```

This installs three commands:

- `ropepull-referee`
- `ropepull-player`
- `ropepull-display`

## Running a match

Write a configuration file, then start the referee with it:

```
ropepull-referee config.txt
```

The referee starts the players and the display itself. It runs each of them as
`python -m ropepull.player` or `python -m ropepull.display`. You do not
normally run `ropepull-player` or `ropepull-display` by hand.

### FIFOs

The referee creates these FIFOs in `/tmp`:

- `fifo_team_<team>_player_<player>`, one for each player;
- `fifo_opengl`, for the display.

It removes them when the match ends. If a FIFO with one of these names is
already there, for example after an interrupted run, the referee stops with an
error. Delete the stale files before starting again.

### How a match ends

A match ends in one of three ways:

- a team's score reaches `max_score`;
- a team wins `max_score / 2 + 1` rounds in a row (the division rounds down);
- `max_time` seconds pass.

In the last case the referee prints the team with the higher score as the
winner, or `Tie`.

After every round the referee tells each player over a pipe whether its team
currently leads: `Winner`, `Loser` or `tie`. The player prints what it is told.

## How a round works

Each team's players are lined up by current energy, from lowest to highest.
Players with equal energy keep their previous order.

A player's effort is weighted by its place in that line. The first player's
effort counts once and the fourth player's counts four times. The weighted
effort is taken away from that player's energy.

The team with the larger total weighted effort wins the round. When the totals
are equal, team 1 takes the round if its total reaches `win_threshold`;
otherwise nobody scores. A round win adds one to the team's score and to its
streak, and resets the other team's streak.

Once per match, a random player falls. This happens after a random number of
rounds between 3 and `max_score / 2 + 1`, so `max_score` must be at least 4.
The fallen player's energy drops to 0 and its reports are ignored. It stays
down for a random time between `re_join_time_min` and `re_join_time_max`
seconds. When it rejoins, it gets back the energy it had before the fall.

## Configuration

The file holds `key=value` lines with integer values. Blank lines and lines
that start with `#` are ignored, and so are unknown keys. A key that is not
set is 0.

```
# match limits
max_score=10
max_time=60
win_threshold=50

# initial energy range for player 0, 1, 2, 3 of each team (a, b, c, d)
initial_energy_min_a=80
initial_energy_max_a=100
initial_energy_min_b=80
initial_energy_max_b=100
initial_energy_min_c=80
initial_energy_max_c=100
initial_energy_min_d=80
initial_energy_max_d=100

# effort made each round
rate_of_decrease_min=1
rate_of_decrease_max=5

# seconds a fallen player stays out
re_join_time_min=1
re_join_time_max=3
```

Every range must have its minimum no greater than its maximum. Otherwise
drawing a number from it raises `ValueError`.

## Using the library

The match rules do not depend on any processes, so you can drive them directly.

### `ropepull.config`

`parse_config(text)` and `load_config(filename)` return a `Config`.

### `ropepull.game`

This module holds the rules.

- `random_in_range(low, high, rng=None)` draws an integer in `[low, high]`.
- `sort_lineup` orders a list of `Slot` objects by energy.
- `Team` keeps a team's score and streak.
- `Match` keeps both teams and their line-ups.

Key methods of `Match`:

- `set_initial_energy` records a player's starting energy.
- `load_current_energy(first)` builds or re-sorts the line-ups.
- `apply_efforts` takes `(team_id, player_id, effort)` reports and scores the
  round. It returns a `RoundResult`, or `None` once the match has finished.
- `check_winner` and `final_result` decide the match.
- `leader` and `status_for` say which team leads.
- `player_fallen` and `player_woken` handle the fall.
- `display_message` builds the snapshot sent to the scoreboard.

Example:

```python
from ropepull.config import parse_config
from ropepull.game import Match

match = Match(parse_config("max_score=4\nwin_threshold=10\n"))
for player_id, energy in enumerate([90, 80, 100, 70]):
    match.set_initial_energy(0, player_id, 0, energy)
    match.set_initial_energy(1, player_id, 0, energy)
match.load_current_energy(True)
result = match.apply_efforts([(0, 0, 5), (1, 0, 3)])
print(result.winner, match.teams[0].score)
```

### `ropepull.messages`

`Message` and `DisplayMessage` are the fixed-size records sent over the FIFOs.
Each has `pack` and `unpack`. `Message.value` reads the integer in a message's
text content.

### Processes and display

- `ropepull.referee`: `Referee` runs a whole match, and `fifo_path` names a
  player's FIFO.
- `ropepull.player`: `Player` is one player process.
- `ropepull.display`: holds the window's layout helpers, `player_slots` and
  `centered_text_x`, and the `Scoreboard`.

## Tests

```
pip install .[test]
pytest
```