# src/tasks/defaults.py
"""
Default planner table for the twenty supported actions.
"""

from __future__ import annotations

from typing import Iterable, Optional

from env.loader import get_runtime_settings

from .plan_build import plan_build_task
from .plan_climb import plan_climb_task
from .plan_combat import plan_combat_task
from .plan_composter import plan_composter_task
from .plan_craft import plan_craft_task
from .plan_display import plan_display_task
from .plan_door import plan_door_task
from .plan_eat import plan_eat_task
from .plan_explore import plan_explore_task
from .plan_gather import plan_gather_task
from .plan_guard import plan_guard_task
from .plan_interact import plan_interact_task
from .plan_mine import plan_mine_task
from .plan_minecart import plan_minecart_task
from .plan_ranged import plan_ranged_task
from .plan_redstone import plan_redstone_task
from .plan_scaffolding import plan_scaffolding_task
from .plan_sleep import plan_sleep_task
from .plan_throw import plan_throw_task
from .plan_trade import plan_trade_task
from .registry import PlannerRegistry

DEFAULT_PLANNERS = {
    "build": plan_build_task,
    "mine": plan_mine_task,
    "explore": plan_explore_task,
    "gather": plan_gather_task,
    "guard": plan_guard_task,
    "craft": plan_craft_task,
    "interact": plan_interact_task,
    "combat": plan_combat_task,
    "eat": plan_eat_task,
    "sleep": plan_sleep_task,
    "door": plan_door_task,
    "climb": plan_climb_task,
    "redstone": plan_redstone_task,
    "throw": plan_throw_task,
    "trade": plan_trade_task,
    "minecart": plan_minecart_task,
    "display": plan_display_task,
    "composter": plan_composter_task,
    "scaffolding": plan_scaffolding_task,
    "ranged": plan_ranged_task,
}


def register_default_planners(registry: PlannerRegistry, parallel_actions: Optional[Iterable[str]] = None) -> PlannerRegistry:
    """Register every default planner; `parallel_actions` defaults to the configured set."""
    if parallel_actions is None:
        parallel_actions = get_runtime_settings().registry.parallel_actions
    parallel = set(parallel_actions)
    for action, handler in DEFAULT_PLANNERS.items():
        registry.register(
            action,
            handler,
            module_path=handler.__module__,
            export_name=handler.__name__,
            parallel=action in parallel,
        )
    return registry


def create_default_registry(**kwargs) -> PlannerRegistry:
    """PlannerRegistry(**kwargs) with the default planners registered."""
    return register_default_planners(PlannerRegistry(**kwargs))
