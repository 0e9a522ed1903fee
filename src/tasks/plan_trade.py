# src/tasks/plan_trade.py
"""
Villager and wandering-trader trading.

The trade is resolved from the villager's profession and level, priced
with the active modifiers (Hero of the Village, reputation, cured
discount) and blocked when the inventory cannot pay for it.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from domain.lookup import table_key
from domain.trades import (
    REPUTATION_EFFECTS,
    calculate_trade_value,
    format_trade,
    get_available_trades,
    level_for_xp,
    reputation_tier,
    resolve_price,
)
from spec.types import Inventory, Plan, PlanContext, TaskRequest

from .helpers import (
    blocked_plan,
    create_plan,
    create_step,
    describe_target,
    failed_plan,
    planning_mode,
    target_position,
)

TRADE_MS = 5000
ACQUISITION_MS = 60000
TRADE_REACH = 3


def _villager_level(villager: Mapping[str, Any]) -> str:
    level = villager.get("level")
    if isinstance(level, str) and level.strip():
        return table_key(level)
    if villager.get("xp") is not None:
        return level_for_xp(villager["xp"])
    return "novice"


def find_best_trade(desired_item: Any, villagers: Any = None) -> Optional[Dict[str, Any]]:
    """Cheapest offer of `desired_item` among `villagers`."""
    wanted = table_key(desired_item)
    matches = []
    for villager in villagers or []:
        if not isinstance(villager, Mapping):
            continue
        level = _villager_level(villager)
        for trade in get_available_trades(villager.get("profession"), level):
            if table_key(trade["sell"]) == wanted:
                matches.append(
                    {
                        "villager": dict(villager),
                        "trade": trade,
                        "cost": resolve_price(trade["buyCount"]),
                        "profession": villager.get("profession"),
                        "level": level,
                    }
                )
    if not matches:
        return None
    return min(matches, key=lambda m: m["cost"])


def calculate_emerald_needs(trades: Any = None, inventory: Any = None) -> Dict[str, Any]:
    total = 0
    breakdown = []
    for trade in trades or []:
        priced = calculate_trade_value(trade)
        cost = priced["buyCount"] if priced["buy"] == "emerald" else 0
        total += cost
        breakdown.append({"trade": format_trade(priced), "emeraldCost": cost})

    current = Inventory.from_raw(inventory).count("emerald")
    shortage = max(0, total - current)
    return {
        "totalNeeded": total,
        "currentAmount": current,
        "shortage": shortage,
        "sufficient": shortage == 0,
        "breakdown": breakdown,
    }


def trade_modifiers(ctx: PlanContext, villager: Mapping[str, Any]) -> Dict[str, Any]:
    modifiers: Dict[str, Any] = {
        "heroDiscount": bool(ctx.get("hasHeroEffect")),
        "reputationDiscount": ctx.get("reputationDiscount") or 0,
        "curedDiscount": bool(villager.get("cured")),
    }
    score = villager.get("reputation", ctx.get("reputation"))
    if score is not None:
        tier = reputation_tier(score)
        effects = REPUTATION_EFFECTS[tier]
        modifiers["reputation"] = tier
        if effects.get("discount") and not modifiers["reputationDiscount"]:
            modifiers["reputationDiscount"] = effects["discount"]
        if effects.get("priceIncrease"):
            modifiers["reputationIncrease"] = effects["priceIncrease"]
        if effects.get("noTrades"):
            modifiers["noTrades"] = True
    return modifiers


def plan_trade_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    if planning_mode(request) == "emeralds":
        return plan_emerald_acquisition(request, context)
    ctx = PlanContext.coerce(context)

    desired = request.option("item", "want")
    explicit_trade = request.option("trade")
    if not desired and not isinstance(explicit_trade, Mapping):
        return failed_plan(request, "Trade with villager", error="No trade or desired item specified")

    villager = request.option("villager") or ctx.get("nearestVillager")
    if not isinstance(villager, Mapping):
        return blocked_plan(
            request,
            "Trade with villager",
            error="No villager available",
            suggestion="Find a village or cure a zombie villager",
        )

    villager = dict(villager)
    profession = str(villager.get("profession") or "villager")
    level = _villager_level(villager)
    summary = f"Trade with {profession}"
    offers = get_available_trades(profession, level)
    if not offers:
        return failed_plan(request, summary, error=f"{profession} villager has no trades available")

    trade = dict(explicit_trade) if isinstance(explicit_trade, Mapping) else None
    if trade is None:
        wanted = table_key(desired)
        trade = next((t for t in offers if table_key(t["sell"]) == wanted), None)
        if trade is None:
            return failed_plan(
                request,
                summary,
                error=f"{profession} doesn't trade {desired}",
                availableTrades=[f"{t['sell']} for {resolve_price(t['buyCount'])} {t['buy']}" for t in offers],
            )

    modifiers = trade_modifiers(ctx, villager)
    if modifiers.get("noTrades"):
        return blocked_plan(
            request,
            summary,
            error=f"{profession} refuses to trade (reputation {modifiers['reputation']})",
            suggestion="Improve reputation by trading with or helping other villagers",
        )

    value = calculate_trade_value(trade, modifiers, policy=str(request.option("pricePolicy") or "min"))
    inventory = ctx.inventory
    giving = {value["buy"]: value["buyCount"]}
    if value["buy2"]:
        giving[value["buy2"]] = value["buy2Count"]

    if any(inventory.count(item) < need for item, need in giving.items()):
        return blocked_plan(
            request,
            summary,
            error="Insufficient items for trade",
            suggestion=f"Gather {', '.join(f'{n} {i}' for i, n in giving.items())}",
            required={item: {"need": need, "have": inventory.count(item)} for item, need in giving.items()},
        )

    steps = []
    position = target_position(villager.get("position"))
    if position is not None:
        steps.append(
            create_step(
                "navigate_to_villager",
                "movement",
                f"Navigate to {profession} at {describe_target(position)}",
                {"target": position, "maxDistance": TRADE_REACH},
            )
        )
    steps.extend(
        [
            create_step(
                "open_trade_interface",
                "interaction",
                f"Open trade interface with {profession}",
                {"villager": villager, "profession": profession, "level": level},
            ),
            create_step(
                "select_trade",
                "interaction",
                f"Select trade: {format_trade(value)}",
                {"trade": value, "discount": value["discount"]},
            ),
            create_step(
                "confirm_trade",
                "interaction",
                "Complete trade",
                {"giving": giving, "receiving": {value["sell"]: value["sellCount"]}},
            ),
        ]
    )

    notes = []
    if value["discount"]:
        notes.append(f"Discounted from {value['originalBuyCount']} to {value['buyCount']} {value['buy']}.")

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=TRADE_MS,
        resources=list(giving),
        notes=notes,
    )
    plan.outcome = {
        "trade": value,
        "villagerProfession": profession,
        "villagerLevel": level,
        "modifiers": modifiers,
    }
    return plan


def plan_emerald_acquisition(task: Any, context: Any = None) -> Plan:
    """Sell held goods to nearby villagers until `amount` emeralds (default 10) are earned."""
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    target = request.option("amount")
    target = int(target) if isinstance(target, (int, float)) and not isinstance(target, bool) and target > 0 else 10
    summary = f"Acquire {target} emeralds"
    inventory = ctx.inventory

    candidates = []
    for villager in ctx.get("nearbyVillagers") or []:
        if not isinstance(villager, Mapping):
            continue
        for trade in get_available_trades(villager.get("profession"), _villager_level(villager)):
            if trade["sell"] != "emerald":
                continue
            price = resolve_price(trade["buyCount"])
            held = inventory.count(trade["buy"])
            if price > 0 and held >= price:
                max_trades = held // price
                candidates.append(
                    {
                        "villager": dict(villager),
                        "trade": trade,
                        "itemNeeded": trade["buy"],
                        "countNeeded": price,
                        "emeraldsPerTrade": trade["sellCount"],
                        "maxTrades": max_trades,
                        "totalEmeralds": max_trades * trade["sellCount"],
                    }
                )

    if not candidates:
        return blocked_plan(
            request,
            summary,
            error="No villagers want items in inventory",
            suggestion="Gather coal, wheat, carrots, or other tradeable items",
        )

    candidates.sort(key=lambda c: c["emeraldsPerTrade"], reverse=True)
    acquired = 0
    selected: List[Dict[str, Any]] = []
    for candidate in candidates:
        if acquired >= target:
            break
        needed = math.ceil((target - acquired) / candidate["emeraldsPerTrade"])
        count = min(needed, candidate["maxTrades"])
        selected.append({**candidate, "tradesToMake": count})
        acquired += count * candidate["emeraldsPerTrade"]

    steps = [
        create_step(
            f"trade_{i}",
            "interaction",
            f"Trade {s['tradesToMake']}x {s['countNeeded']} {s['itemNeeded']} for "
            f"{s['tradesToMake'] * s['emeraldsPerTrade']} emeralds",
            {"villager": s["villager"], "trade": s["trade"], "count": s["tradesToMake"]},
        )
        for i, s in enumerate(selected, start=1)
    ]

    risks = []
    if acquired < target:
        risks.append(f"Only {acquired} of {target} emeralds reachable with current inventory.")

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=ACQUISITION_MS,
        resources=[s["itemNeeded"] for s in selected],
        risks=risks,
        metadata={"complexity": "medium"},
    )
    plan.outcome = {
        "targetEmeralds": target,
        "emeraldsAcquired": acquired,
        "tradesRequired": len(selected),
        "surplus": acquired - target,
    }
    return plan
