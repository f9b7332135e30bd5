import numpy as np
import pytest

from rlgrid.app.playback import PolicyPlayback


def test_starts_on_start_cell(env, agent):
    playback = PolicyPlayback(env, agent)
    assert playback.position == (0, 0)
    assert playback.steps == 0
    assert not playback.is_finished


def test_advance_walks_the_policy_to_the_goal(env, scripted_agent):
    before = scripted_agent.q_table.copy()
    playback = PolicyPlayback(env, scripted_agent, greedy=True)

    positions = []
    while not playback.is_finished:
        result = playback.advance()
        assert result.new_position == playback.position
        positions.append(playback.position)

    assert positions[-1] == (4, 4)
    assert playback.steps == 8
    assert playback.total_reward == pytest.approx(93.0)
    assert playback.advance() is None
    np.testing.assert_array_equal(scripted_agent.q_table, before)


def test_stops_on_a_trap(env, agent):
    agent._q[env.state_index((2, 2))][0] = 5.0
    playback = PolicyPlayback(env, agent, start=(2, 2), greedy=True)
    result = playback.advance()
    assert result.new_position == (2, 1)
    assert result.reward == -100
    assert result.done
    assert playback.is_finished


def test_terminal_position_is_finished(env, agent):
    playback = PolicyPlayback(env, agent)
    playback.position = (3, 3)
    assert playback.is_finished
    assert playback.advance() is None


def test_step_cap(env, agent):
    # the untrained greedy policy bumps into the top wall forever
    playback = PolicyPlayback(env, agent, max_steps=3, greedy=True)
    for _ in range(3):
        assert playback.advance() is not None
    assert playback.is_finished
    assert playback.position == (0, 0)
    assert playback.advance() is None


def test_reset(env, scripted_agent):
    playback = PolicyPlayback(env, scripted_agent, greedy=True)
    playback.advance()
    playback.advance()
    playback.reset()
    assert playback.position == (0, 0)
    assert playback.steps == 0
    assert playback.total_reward == 0.0


def test_position_setter_rejects_out_of_bounds(env, agent):
    playback = PolicyPlayback(env, agent)
    with pytest.raises(ValueError):
        playback.position = (5, 0)
