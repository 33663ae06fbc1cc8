import pytest

from ropepull.messages import DisplayMessage, Message, MessageType


def test_message_round_trip():
    original = Message(MessageType.EFFORT, 3, 4242, 1, "17")
    restored = Message.unpack(original.pack())
    assert restored == original
    assert restored.type is MessageType.PULL_START


def test_message_size_is_fixed():
    packed = Message(MessageType.INITIAL_ENERGY, 0, 1, 0, "5").pack()
    assert len(packed) == Message.SIZE == 36


def test_message_content_truncated_to_fit_terminator():
    restored = Message.unpack(Message(1, 0, 1, 0, "x" * 30).pack())
    assert restored.content == "x" * 19


def test_message_value_parses_leading_integer():
    assert Message(2, 0, 1, 0, "42").value == 42
    assert Message(2, 0, 1, 0, "-7abc").value == -7
    assert Message(2, 0, 1, 0, "abc").value == 0


def test_unknown_type_kept_as_integer():
    restored = Message.unpack(Message(99, 1, 2, 0, "1").pack())
    assert restored.type == 99


def test_message_unpack_rejects_wrong_length():
    with pytest.raises(ValueError):
        Message.unpack(b"\0" * (Message.SIZE - 1))


def test_display_message_round_trip():
    original = DisplayMessage((1, 2, 3, 4), (3, 2, 1, 0), (5, 6, 7, 8), (0, 1, 2, 3), 4, 9)
    restored = DisplayMessage.unpack(original.pack())
    assert restored == original
    assert restored.ids_1 == (3, 2, 1, 0)
    assert (restored.score_1, restored.score_2) == (4, 9)


def test_display_message_size():
    message = DisplayMessage([0] * 4, [0] * 4, [0] * 4, [0] * 4)
    assert len(message.pack()) == DisplayMessage.SIZE == 72


def test_display_message_accepts_lists_as_tuples():
    message = DisplayMessage([1, 2, 3, 4], [0, 1, 2, 3], [4, 3, 2, 1], [3, 2, 1, 0])
    assert message.energies_1 == (1, 2, 3, 4)


def test_display_message_requires_four_values():
    with pytest.raises(ValueError):
        DisplayMessage((1, 2, 3), (0, 1, 2, 3), (1, 2, 3, 4), (0, 1, 2, 3))


def test_display_message_unpack_rejects_wrong_length():
    with pytest.raises(ValueError):
        DisplayMessage.unpack(b"\0" * 10)