import pytest

from bupcat.input import MAX_PLAYERS, InputState


def test_fresh_state_has_nothing_down():
    state = InputState()
    assert state.is_up(0, 1)
    assert not state.is_down(0, 1)
    assert not state.is_pressed(0, 1)
    assert state.mouse_position(0) == (0, 0)


def test_press_hold_release_cycle():
    state = InputState()
    state.set_buttons(0, 0b101)
    assert state.is_down(0, 0b001)
    assert state.is_down(0, 0b100)
    assert not state.is_down(0, 0b010)
    assert state.is_pressed(0, 0b001)

    state.set_buttons(0, 0b101)
    assert state.is_down(0, 0b001)
    assert not state.is_pressed(0, 0b001)

    state.set_buttons(0, 0)
    assert state.is_released(0, 0b100)
    assert state.is_up(0, 0b100)


def test_multi_bit_key_matches_any():
    state = InputState()
    state.set_buttons(0, 0b010)
    assert state.is_down(0, 0b011)
    assert not state.is_up(0, 0b011)


def test_players_are_independent():
    state = InputState()
    state.apply_packet(3, 0b1)
    assert state.is_down(3, 0b1)
    assert not state.is_down(2, 0b1)


def test_apply_packet_tracks_edges():
    state = InputState()
    state.apply_packet(1, 0b10)
    state.apply_packet(1, 0b00)
    assert state.is_released(1, 0b10)
    assert not state.is_pressed(1, 0b10)


@pytest.mark.parametrize("player", [-1, MAX_PLAYERS])
def test_invalid_player_raises(player):
    state = InputState()
    with pytest.raises(IndexError):
        state.is_down(player, 1)


def test_custom_player_count():
    state = InputState(max_players=2)
    state.set_buttons(1, 1)
    assert state.is_down(1, 1)
    with pytest.raises(IndexError):
        state.set_buttons(2, 1)