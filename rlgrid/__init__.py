"""RL Grid World - tabular Q-learning on a small grid with a goal and traps.

The agent learns, by trial and error, to walk from the top-left corner to the
goal while avoiding trap cells.
"""

__version__ = "1.0.0"
__author__ = "RL Grid World Demo"
