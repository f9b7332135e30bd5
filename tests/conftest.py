import pytest

from rlgrid.domain.environment import GridWorld
from rlgrid.domain.qlearning import QLearningAgent
from rlgrid.domain.types import RLConfig


@pytest.fixture
def env():
    return GridWorld()


@pytest.fixture
def agent(env):
    return QLearningAgent(env, RLConfig(seed=0))


@pytest.fixture
def scripted_agent(env):
    """Agent whose greedy policy goes right along row 0, then down column 4."""
    agent = QLearningAgent(env, RLConfig(seed=0))
    for x in range(env.size - 1):
        agent._q[env.state_index((x, 0))][3] = 1.0
    for y in range(env.size - 1):
        agent._q[env.state_index((env.size - 1, y))][1] = 1.0
    return agent
