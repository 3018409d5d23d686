"""AI components: heuristic placement planner."""

from tetris_battle.ai.planner import HeuristicPlanner, Placement, Weights

__all__ = [
    "HeuristicPlanner",
    "Placement",
    "Weights",
]
