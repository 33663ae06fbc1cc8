import pytest

from ropepull.display import (
    SCREEN_WIDTH,
    SLOT_MARGIN,
    SLOT_SPACING,
    TEAM_1_WIN,
    TEAM_2_WIN,
    Scoreboard,
    centered_text_x,
    main,
    player_name,
    player_slots,
)
from ropepull.messages import DisplayMessage


def snapshot(score_1, score_2):
    return DisplayMessage([5, 6, 7, 8], [0, 1, 2, 3], [1, 2, 3, 4], [3, 2, 1, 0], score_1, score_2)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_left_slots_end_at_margin_and_are_evenly_spaced():
    slots = player_slots(0)
    assert slots[-1] == SLOT_MARGIN
    assert [a - b for a, b in zip(slots, slots[1:])] == [SLOT_SPACING] * 3


def test_right_slots_mirror_left_slots():
    left, right = player_slots(0), player_slots(1)
    assert [a + b for a, b in zip(left, right)] == [SCREEN_WIDTH] * 4
    assert right[-1] == SCREEN_WIDTH - SLOT_MARGIN


def test_first_position_is_nearest_the_middle():
    left, right = player_slots(0), player_slots(1)
    assert left[0] == max(left)
    assert right[0] == min(right)


@pytest.mark.parametrize("side", [-1, 2])
def test_unknown_side_rejected(side):
    with pytest.raises(ValueError):
        player_slots(side)


def test_centered_text_x_empty_text_is_at_x():
    assert centered_text_x(100, "") == 100


def test_centered_text_x_moves_left_with_length():
    assert centered_text_x(100, "abcd") == 84
    assert centered_text_x(100, "abcde") < centered_text_x(100, "abcd")


def test_player_name_falls_back_to_number():
    assert player_name(0, 9) == "9"
    assert player_name(0, 0) != player_name(1, 0)


def test_initial_banner_is_team_two():
    board = Scoreboard(clock=FakeClock())
    assert board.banner() == TEAM_2_WIN
    assert board.banner() == "Team 2 Win"


def test_first_score_change_from_zero_does_not_set_winner():
    board = Scoreboard(clock=FakeClock())
    board.update(snapshot(0, 0))
    board.update(snapshot(1, 0))
    assert board.team_win == 0
    assert board.banner() == TEAM_2_WIN


def test_team_one_score_change_sets_team_one_banner():
    board = Scoreboard(clock=FakeClock())
    board.update(snapshot(1, 0))
    board.update(snapshot(2, 0))
    assert board.team_win == 1
    assert board.banner() == TEAM_1_WIN
    assert board.banner() == "Team 1 Win "


def test_team_two_score_change_sets_team_two_banner():
    board = Scoreboard(clock=FakeClock())
    board.update(snapshot(1, 0))
    board.update(snapshot(2, 0))
    board.update(snapshot(2, 1))
    assert board.team_win == 2
    assert board.banner() == TEAM_2_WIN


def test_team_two_change_ignored_while_team_one_score_is_zero():
    board = Scoreboard(clock=FakeClock())
    board.update(snapshot(0, 1))
    board.update(snapshot(0, 2))
    assert board.team_win == 0


def test_update_keeps_latest_message_and_scores():
    board = Scoreboard(clock=FakeClock())
    message = snapshot(3, 4)
    board.update(message)
    assert board.message == message
    assert board.score_texts() == ("Score Team 1: 3", "Score Team 2: 4")


def test_time_text_counts_whole_seconds():
    clock = FakeClock(50.0)
    board = Scoreboard(clock=clock)
    assert board.time_text() == "Time: 0 s"
    clock.now = 57.9
    assert board.elapsed == 7
    assert board.time_text() == "Time: 7 s"


def test_main_without_fifo_is_usage_error(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().err