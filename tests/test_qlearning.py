import numpy as np
import pytest

from rlgrid.domain.environment import GridWorld
from rlgrid.domain.qlearning import QLearningAgent
from rlgrid.domain.types import RLConfig


class FixedRNG:
    """Stand-in generator that always explores with a fixed action."""

    def __init__(self, draw: float, action: int):
        self.draw = draw
        self.action = action

    def random(self):
        return self.draw

    def randint(self, a, b):
        assert (a, b) == (0, 3)
        return self.action


def test_table_starts_at_zero(agent, env):
    assert agent.q_table.shape == (env.n_states, 4)
    assert not agent.q_table.any()


def test_q_table_view_is_read_only(agent):
    with pytest.raises(ValueError):
        agent.q_table[0][0] = 1.0


def test_q_values_returns_a_copy(agent):
    values = agent.q_values((0, 0))
    values[0] = 42.0
    assert agent.q_values((0, 0))[0] == 0.0


def test_update_rule(agent, env):
    # seed the next state with a value so the bootstrap term matters
    agent.update(1, 3, 100.0, 2)
    assert agent.get_q_value(1, 3) == pytest.approx(10.0)

    agent.update(0, 3, -1.0, 1)
    # 0 + 0.1 * (-1 + 0.9 * 10 - 0)
    assert agent.get_q_value(0, 3) == pytest.approx(0.8)


@pytest.mark.parametrize("old,reward,next_max", [
    (0.0, -1.0, 0.0), (5.0, -1.0, 0.0), (-20.0, 100.0, 3.0), (50.0, -100.0, -10.0),
])
def test_update_moves_strictly_toward_target(env, old, reward, next_max):
    agent = QLearningAgent(env, RLConfig())
    agent._q[0][2] = old
    agent._q[7][:] = next_max
    target = reward + 0.9 * next_max

    agent.update(0, 2, reward, 7)
    new = agent.get_q_value(0, 2)
    assert abs(new - target) < abs(old - target)


def test_update_with_full_learning_rate_and_no_discount(env):
    agent = QLearningAgent(env, RLConfig(learning_rate=1.0, discount_factor=0.0))
    agent._q[5][:] = 50.0
    agent.update(0, 1, -1.0, 5)
    assert agent.get_q_value(0, 1) == -1.0


def test_update_only_touches_the_taken_action(agent):
    agent._q[0][1] = 10.0  # greedy action for state 0 is Down
    before = agent.q_table.copy()
    agent.update(0, 3, -1.0, 1)

    changed = np.argwhere(agent.q_table != before)
    assert changed.tolist() == [[0, 3]]


def test_update_rejects_bad_action(agent):
    with pytest.raises(ValueError):
        agent.update(0, 4, -1.0, 1)


@pytest.mark.parametrize("state,next_state", [(-1, 0), (25, 0), (0, 25), (0, -1)])
def test_update_rejects_out_of_range_state(agent, env, state, next_state):
    with pytest.raises(ValueError):
        agent.update(state, 0, 50.0, next_state)
    # negative indices must not wrap around onto the goal row
    assert not agent.q_values(env.goal).any()
    assert not agent.q_table.any()


def test_train_rejects_non_positive_episode_count(agent):
    with pytest.raises(ValueError):
        agent.train(episodes=0)
    assert agent.episodes_completed == 0


def test_greedy_rollout_rejects_zero_step_cap(agent):
    with pytest.raises(ValueError):
        agent.greedy_rollout(max_steps=0)


def test_greedy_ties_break_to_up(agent, env):
    for position in env.positions():
        assert agent.choose_action(position, epsilon=0.0) == 0

    agent._q[env.state_index((2, 2))][:] = 7.5
    assert agent.choose_action((2, 2), epsilon=0.0) == 0


def test_greedy_ties_break_to_lowest_ordinal(agent, env):
    state = env.state_index((1, 3))
    agent._q[state] = [-5.0, 2.0, -1.0, 2.0]
    assert agent.best_action((1, 3)) == 1
    assert agent.choose_action((1, 3), epsilon=0.0) == 1


def test_greedy_picks_maximum(agent, env):
    agent._q[env.state_index((0, 0))] = [-3.0, -2.0, -4.0, 1.5]
    assert agent.choose_action((0, 0), epsilon=0.0) == 3


def test_exploration_draws_random_action(env):
    agent = QLearningAgent(env, RLConfig(epsilon=0.2), rng=FixedRNG(draw=0.1, action=2))
    agent._q[0][3] = 10.0
    assert agent.choose_action((0, 0)) == 2


def test_exploitation_when_draw_above_epsilon(env):
    agent = QLearningAgent(env, RLConfig(epsilon=0.2), rng=FixedRNG(draw=0.2, action=2))
    agent._q[0][3] = 10.0
    assert agent.choose_action((0, 0)) == 3


def test_full_exploration_covers_all_actions(env):
    agent = QLearningAgent(env, RLConfig(epsilon=1.0, seed=3))
    actions = {agent.choose_action((0, 0)) for _ in range(200)}
    assert actions == {0, 1, 2, 3}


def test_train_episode_ends_on_terminal_cell(agent):
    episode = agent.train_episode()
    assert episode.number == 0
    assert episode.steps >= 1
    assert episode.reached_goal != episode.hit_trap
    assert agent.episodes_completed == 1
    assert agent.training_history == [episode]
    assert agent.q_table.any()


def test_train_bookkeeping(agent):
    result = agent.train(episodes=200)

    assert result.total_episodes == 200
    assert len(result.episodes) == 200
    assert result.successful_episodes + result.trapped_episodes == 200
    assert result.success_rate == pytest.approx(result.successful_episodes / 200)
    assert result.average_reward == pytest.approx(
        sum(ep.total_reward for ep in result.episodes) / 200)
    assert [ep.number for ep in result.episodes] == list(range(200))
    assert agent.episodes_completed == 200


def test_train_defaults_to_configured_episode_count(env):
    agent = QLearningAgent(env, RLConfig(episodes=30, seed=1))
    seen = []
    result = agent.train(progress_callback=seen.append)
    assert result.total_episodes == 30
    assert seen == result.episodes


def test_terminal_rows_are_never_written(agent, env):
    agent.train(episodes=300)
    for position in (env.goal,) + env.traps:
        assert not agent.q_values(position).any()


def test_step_cap(env):
    agent = QLearningAgent(env, RLConfig(max_steps_per_episode=1, seed=0))
    result = agent.train(episodes=20)
    assert all(ep.steps == 1 for ep in result.episodes)
    # a single step from (0, 0) can reach neither the goal nor a trap
    assert result.successful_episodes == 0
    assert result.trapped_episodes == 0


def test_same_seed_reproduces_table(env):
    first = QLearningAgent(env, RLConfig(seed=11))
    second = QLearningAgent(env, RLConfig(seed=11))
    first.train(episodes=100)
    second.train(episodes=100)
    np.testing.assert_array_equal(first.q_table, second.q_table)


def test_reset_clears_learning(agent):
    agent.train(episodes=20)
    agent.reset()
    assert not agent.q_table.any()
    assert agent.episodes_completed == 0
    assert agent.training_history == []


def test_greedy_rollout_follows_table(scripted_agent):
    before = scripted_agent.q_table.copy()
    rollout = scripted_agent.greedy_rollout()

    assert rollout.success
    assert rollout.steps_taken == 8
    assert rollout.path[0] == (0, 0)
    assert rollout.path[-1] == (4, 4)
    assert len(rollout.path) == 9
    assert rollout.total_reward == pytest.approx(7 * -1 + 100)
    np.testing.assert_array_equal(scripted_agent.q_table, before)


def test_greedy_rollout_stops_on_a_looping_policy(agent):
    # an untrained table keeps choosing Up from the top-left corner
    rollout = agent.greedy_rollout()
    assert not rollout.success
    assert not rollout.hit_trap
    assert rollout.steps_taken == 25
    assert set(rollout.path) == {(0, 0)}


def test_greedy_rollout_reports_trap(env):
    agent = QLearningAgent(env, RLConfig())
    agent._q[env.state_index((0, 0))][3] = 1.0
    agent._q[env.state_index((1, 0))][3] = 1.0
    agent._q[env.state_index((2, 0))][1] = 1.0
    rollout = agent.greedy_rollout()
    assert rollout.hit_trap
    assert not rollout.success
    assert rollout.path == [(0, 0), (1, 0), (2, 0), (2, 1)]


def test_learns_shortest_safe_path_for_most_seeds():
    env = GridWorld()
    seeds = range(10)
    successes = 0
    for seed in seeds:
        agent = QLearningAgent(env, RLConfig(seed=seed))
        agent.train(episodes=1000)
        rollout = agent.greedy_rollout(max_steps=2 * (env.size - 1))
        if rollout.success:
            assert not set(rollout.path) & set(env.traps)
            successes += 1
    assert successes >= 6
