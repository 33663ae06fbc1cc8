import os
import random

import pytest

from ropepull.config import Config
from ropepull.messages import Message, MessageType
from ropepull.player import Player, main


def make_config():
    return Config(
        initial_energy_min=[10, 20, 30, 40],
        initial_energy_max=[15, 25, 35, 45],
        rate_of_decrease_min=1,
        rate_of_decrease_max=5,
        re_join_time_min=2,
        re_join_time_max=4,
    )


def make_player(player_id=0, seed=1, config=None):
    return Player(config or make_config(), player_id, 0, "unused", -1,
                  rng=random.Random(seed), parent_pid=1)


CONFIG_TEXT = (
    "initial_energy_min_a=10\ninitial_energy_max_a=15\n"
    "initial_energy_min_b=20\ninitial_energy_max_b=25\n"
    "rate_of_decrease_min=1\nrate_of_decrease_max=5\n"
)


@pytest.mark.parametrize("player_id", [0, 1, 2, 3])
def test_generate_energy_within_player_range(player_id):
    config = make_config()
    for seed in range(30):
        energy = make_player(player_id, seed, config).generate_energy()
        assert config.initial_energy_min[player_id] <= energy <= config.initial_energy_max[player_id]


def test_make_effort_and_rejoin_delay_within_range():
    config = make_config()
    player = make_player(config=config)
    efforts = [player.make_effort() for _ in range(100)]
    delays = [player.rejoin_delay() for _ in range(100)]
    assert all(config.rate_of_decrease_min <= e <= config.rate_of_decrease_max for e in efforts)
    assert all(config.re_join_time_min <= d <= config.re_join_time_max for d in delays)


def test_fixed_range_gives_that_value():
    config = make_config()
    config.rate_of_decrease_min = config.rate_of_decrease_max = 7
    assert make_player(config=config).make_effort() == 7


def test_same_seed_same_choices():
    first = make_player(seed=42)
    second = make_player(seed=42)
    assert [first.make_effort() for _ in range(10)] == [second.make_effort() for _ in range(10)]


def test_empty_range_raises():
    config = make_config()
    config.initial_energy_min[0] = 50
    with pytest.raises(ValueError):
        make_player(config=config).generate_energy()


def test_run_reports_energy_and_prints_status(tmp_path, capsys):
    fifo = tmp_path / "channel"
    fifo.write_bytes(b"")
    read_end, write_end = os.pipe()
    os.write(write_end, b"Winner")
    os.close(write_end)
    config = make_config()
    player = Player(config, 1, 1, fifo, read_end, rng=random.Random(3), parent_pid=1)
    player.run()

    message = Message.unpack(fifo.read_bytes())
    assert message.type == MessageType.INITIAL_ENERGY
    assert (message.player_id, message.team_id) == (1, 1)
    assert message.player_pid == os.getpid()
    assert config.initial_energy_min[1] <= message.value <= config.initial_energy_max[1]
    assert "player 1 in team 2 is a Winner" in capsys.readouterr().out


def test_main_requires_arguments(capsys):
    assert main(["config.txt"]) == 1
    assert "Usage" in capsys.readouterr().err


def test_main_rejects_non_numeric_ids(tmp_path, capsys):
    assert main([str(tmp_path / "c"), "fifo", "x", "0", "3"]) == 1
    assert "Usage" in capsys.readouterr().err


def test_main_missing_config(tmp_path, capsys):
    assert main([str(tmp_path / "absent.txt"), "fifo", "0", "0", "3"]) == 1
    assert "Failed to load config file." in capsys.readouterr().err


def test_main_missing_fifo(tmp_path):
    config_file = tmp_path / "config.txt"
    config_file.write_text(CONFIG_TEXT)
    read_end, write_end = os.pipe()
    os.close(write_end)
    result = main([str(config_file), str(tmp_path / "absent_fifo"), "0", "0", str(read_end)])
    assert result == 1