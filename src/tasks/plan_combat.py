# src/tasks/plan_combat.py
"""
Combat engagement planner.

Enemy profiles set the priority order and dodge advice, matchups and
countermeasures compile the required equipment, the stance chooses
weapon preference and engagement distance, and an optional squad gets
leader / flanker / cover roles.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from domain.combat import (
    COMBAT_STANCES,
    ENEMY_COUNTERMEASURES,
    HAZARD_RISK_MESSAGES,
    HEALTH_ALLY_THRESHOLD,
    HEALTH_CRITICAL_THRESHOLD,
    HEALTH_HEALER_THRESHOLD,
    HEALTH_LOW_THRESHOLD,
    SQUAD_ROLE_ORDER,
    SQUAD_ROLE_PROFILES,
    SUPPORT_ROLE_PROFILE,
    enemy_key,
    get_enemy_profile,
    match_battlefield,
)
from spec.types import Plan, PlanContext, TaskRequest

from .combat_utils import (
    build_durability_alerts,
    display_name,
    evaluate_risk,
    extract_durability_entries,
    format_list,
    optional_name,
    recommend_weapons,
)
from .helpers import (
    create_plan,
    create_step,
    describe_target,
    format_requirement_list,
    has_inventory_item,
    normalize_item_name,
    resolve_quantity,
)


BASE_DURATION_MS = 9000
PER_ENEMY_MS = 1200
REPLAN_INSTRUCTION = "npc_engine.replanTask('combat')"


# ---------------------------------------------------------------------------
# Squad
# ---------------------------------------------------------------------------

def _member_name(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry or None
    if isinstance(entry, Mapping):
        return entry.get("name") or entry.get("label") or entry.get("id") or entry.get("role")
    return None


def _parse_role_assignments(raw: Any) -> Dict[str, str]:
    """Accepts `[{name, role}]`, `["name:role"]` or `{name: role}`."""
    parsed: Dict[str, str] = {}
    if isinstance(raw, (list, tuple)):
        for entry in raw:
            if isinstance(entry, Mapping):
                name = display_name(entry.get("name") or entry.get("npc") or entry.get("member"))
                role = optional_name(entry.get("role"))
            elif isinstance(entry, str) and ":" in entry:
                name_part, role_part = entry.split(":", 1)
                name, role = display_name(name_part), optional_name(role_part)
            else:
                continue
            if name != "Unknown" and role:
                parsed[name] = role
    elif isinstance(raw, Mapping):
        for name_key, role_value in raw.items():
            role = optional_name(role_value)
            if role:
                parsed[display_name(name_key)] = role
    return parsed


def assign_squad_roles(
    members: Sequence[str],
    explicit_roles: Any = None,
    default_leader: str = "",
) -> List[Dict[str, str]]:
    """
    Role per squad member.

    Explicit assignments win, then the default leader, then the remaining
    roles in order leader, tank, dps, healer, scout. Extra members support.
    """
    if not members:
        return []

    parsed = _parse_role_assignments(explicit_roles)
    remaining = list(SQUAD_ROLE_ORDER)
    assigned: List[Dict[str, str]] = []

    for member in members:
        role = parsed.get(member)
        if role and role in SQUAD_ROLE_PROFILES:
            assigned.append({"name": member, "role": role})
            if role in remaining:
                remaining.remove(role)

    if default_leader and not any(entry["role"] == "leader" for entry in assigned):
        existing = next((entry for entry in assigned if entry["name"] == default_leader), None)
        if existing is not None:
            existing["role"] = "leader"
            remaining.remove("leader")
        elif default_leader in members:
            assigned.append({"name": default_leader, "role": "leader"})
            remaining.remove("leader")

    for member in members:
        if any(entry["name"] == member for entry in assigned):
            continue
        role = remaining.pop(0) if remaining else "support"
        assigned.append({"name": member, "role": role})

    roles = []
    for entry in assigned:
        profile = SQUAD_ROLE_PROFILES.get(entry["role"], SUPPORT_ROLE_PROFILE)
        roles.append({**entry, "summary": profile["summary"], "spacing": profile["spacing"]})
    return roles


# ---------------------------------------------------------------------------
# Contingencies
# ---------------------------------------------------------------------------

def determine_stance_transitions(
    initial_stance: str,
    squad_roles: Sequence[Mapping[str, str]],
    enemy_keys: Sequence[str],
) -> List[Dict[str, str]]:
    transitions: List[Dict[str, str]] = []
    has_healer = any(role["role"] == "healer" for role in squad_roles)
    has_tank = any(role["role"] == "tank" for role in squad_roles)

    if initial_stance and initial_stance != "aggressive":
        transitions.append(
            {
                "from": initial_stance,
                "to": "aggressive",
                "trigger": "combat_event",
                "condition": "Primary target health under 20% or enemy count reduced to one",
                "rationale": "Finish remaining enemies quickly once they are weakened.",
            }
        )
    transitions.append(
        {
            "from": "aggressive",
            "to": "defensive",
            "trigger": "combat_event",
            "condition": "Any ally health below 35% or shield breaks",
            "rationale": "Stabilize line and give healers time to recover.",
        }
    )
    if has_healer:
        transitions.append(
            {
                "from": initial_stance,
                "to": "defensive",
                "trigger": "combat_event",
                "condition": "Healer calls out potion cooldowns or healing resources depleted",
                "rationale": "Shift to defensive stance while support replenishes.",
            }
        )
    if "phantom" in enemy_keys or "ghast" in enemy_keys:
        transitions.append(
            {
                "from": initial_stance,
                "to": "ranged",
                "trigger": "combat_event",
                "condition": "Airborne threats persist for more than 10 seconds",
                "rationale": "Swap to ranged focus to clear aerial mobs.",
            }
        )
    if has_tank:
        transitions.append(
            {
                "from": "defensive",
                "to": "guard",
                "trigger": "combat_event",
                "condition": "Tank secures aggro and allies recovered above 70% health",
                "rationale": "Return to zone control once the frontline is stable.",
            }
        )
    return transitions


def build_health_protocols(
    squad_roles: Sequence[Mapping[str, str]],
    fallback: str,
    allies: Sequence[Any] = (),
) -> List[Dict[str, Any]]:
    protocols: List[Dict[str, Any]] = []
    frontline = next((r for r in squad_roles if r["role"] == "tank"), None) or next(
        (r for r in squad_roles if r["role"] == "leader"), None
    )
    if frontline:
        protocols.append(
            {
                "trigger": "combat_update",
                "threshold": HEALTH_LOW_THRESHOLD,
                "actor": frontline["name"],
                "action": "Signal defensive swap and raise shields",
                "followUp": REPLAN_INSTRUCTION,
            }
        )
    healer = next((r for r in squad_roles if r["role"] == "healer"), None)
    if healer:
        protocols.append(
            {
                "trigger": "combat_update",
                "threshold": HEALTH_HEALER_THRESHOLD,
                "actor": healer["name"],
                "action": "Deploy splash healing or regeneration and call retreat if cooldowns empty",
                "followUp": "plan_safety.retreat",
            }
        )
    protocols.append(
        {
            "trigger": "combat_update",
            "threshold": HEALTH_CRITICAL_THRESHOLD,
            "actor": "squad",
            "action": f"Fallback to {fallback or 'a safe rally point'} immediately if no healer response.",
            "followUp": "plan_safety.retreat",
        }
    )
    for ally in allies:
        if not isinstance(ally, Mapping) or not ally.get("name"):
            continue
        max_health = ally.get("maxHealth")
        if isinstance(max_health, bool) or not isinstance(max_health, (int, float)):
            continue
        protocols.append(
            {
                "trigger": "combat_update",
                "thresholdAbsolute": max_health * HEALTH_ALLY_THRESHOLD,
                "actor": display_name(ally["name"]),
                "action": "Auto-trigger shield wall and rotate to rear if health dips under 30%",
                "followUp": REPLAN_INSTRUCTION,
            }
        )
    return protocols


def _threshold_text(protocol: Mapping[str, Any], absolute_suffix: str = "") -> str:
    if protocol.get("thresholdAbsolute"):
        return f"{round(protocol['thresholdAbsolute'])}{absolute_suffix}"
    return f"{round((protocol.get('threshold') or 0) * 100)}%"


# ---------------------------------------------------------------------------
# Enemies
# ---------------------------------------------------------------------------

def _names(raw: Any) -> List[str]:
    if isinstance(raw, (list, tuple)):
        return [optional_name(v) for v in raw if optional_name(v)]
    if isinstance(raw, str) and raw.strip():
        return [optional_name(raw)]
    return []


def prioritize_enemies(enemy_names: Sequence[str], priority_targets: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Explicit priority targets first (in the given order), then the rest by
    (profile priority, display name).
    """
    details = []
    for name in enemy_names:
        profile = get_enemy_profile(name)
        details.append({"name": enemy_key(name), "displayName": display_name(name), **profile})

    explicit: List[Dict[str, Any]] = []
    explicit_keys = []
    for name in priority_targets:
        key = enemy_key(name)
        if key in explicit_keys:
            continue
        explicit_keys.append(key)
        found = next((d for d in details if d["name"] == key), None)
        explicit.append(found or {"name": key, "displayName": display_name(name), **get_enemy_profile(name)})

    remaining = [d for d in details if d["name"] not in explicit_keys]
    remaining.sort(key=lambda d: (d["priority"], d["displayName"]))
    return explicit + remaining


def _environment_name(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, Mapping):
        return value.get("biome") or value.get("dimension")
    return None


def _condition_advice(time_of_day: str, weather: str, enemy_keys: Sequence[str], advice: Sequence[str]) -> List[str]:
    out: List[str] = []
    if time_of_day == "night":
        out.append("Night visibility is low, carry torches and leverage shields against surprise hits.")
        if "skeleton" in enemy_keys:
            out.append(
                "Avoid trading open-field shots with skeletons at night; pull them into cover or wait for dawn."
            )
    if time_of_day == "day" and "zombie" in enemy_keys:
        out.append("Use daylight to weaken zombies in exposed areas when possible.")
    if "storm" in weather or "thunder" in weather:
        out.append("Thunderstorms spawn extra mobs and can trigger charged creepers, limit time in open terrain.")
    if "rain" in weather and "blaze" in enemy_keys:
        out.append("Rain hampers blaze fireballs, fight them outdoors to capitalize on the weather.")
    out.extend(advice)
    return out


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

def plan_combat_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)
    bridge = ctx.get("bridgeState", default={})
    if not isinstance(bridge, Mapping):
        bridge = {}

    target = normalize_item_name(request.option("targetEntity") or request.details or "hostile mob")
    target_description = describe_target(request.target)
    backup_plan = normalize_item_name(request.option("fallback") or "retreat to base")
    tactic = normalize_item_name(request.option("tactic") or "melee")
    enemy_count = resolve_quantity(request.option("count", "enemyCount"), 1) or 1
    support = optional_name(request.option("support"))

    environment = normalize_item_name(
        _environment_name(request.option("environment"))
        or _environment_name(ctx.get("environment"))
        or _environment_name(bridge.get("environment"))
        or "overworld"
    )
    time_of_day = optional_name(request.option("timeOfDay") or ctx.get("timeOfDay") or bridge.get("timeOfDay"))
    weather = optional_name(request.option("weather") or ctx.get("weather") or bridge.get("weather"))

    npc = ctx.npc
    stance_key = optional_name(
        request.option("stance")
        or npc.get("stance")
        or ctx.get("stance")
        or ("ranged" if "ranged" in tactic else "guard")
    ) or "guard"
    stance = COMBAT_STANCES.get(stance_key.replace(" ", "_"), COMBAT_STANCES["guard"])

    # -- squad ------------------------------------------------------------
    squad_raw = request.option("squadMembers", "squad", "team")
    members = [
        display_name(name)
        for name in (_member_name(e) for e in (squad_raw if isinstance(squad_raw, (list, tuple)) else []))
        if name
    ]
    explicit_leader = request.option("squadLeader", "leader")
    if explicit_leader:
        candidate_leader = display_name(explicit_leader)
    elif members:
        candidate_leader = members[0]
    else:
        candidate_leader = display_name(support) if support else ""
    roles = assign_squad_roles(members, request.option("squadRoles"), candidate_leader)
    leader = next((r["name"] for r in roles if r["role"] == "leader"), candidate_leader)
    if roles:
        flankers = [r["name"] for r in roles if r["role"] in ("dps", "scout")]
        cover = [r["name"] for r in roles if r["role"] in ("healer", "support")]
    else:
        flankers, cover = members[1:3], members[3:]

    # -- enemies ----------------------------------------------------------
    enemy_names: List[str] = []
    for name in [target, *_names(request.option("enemyTypes")), *_names(request.option("additionalHostiles"))]:
        if name not in enemy_names:
            enemy_names.append(name)
    secondary_target = request.option("secondaryTarget")
    if isinstance(secondary_target, str) and optional_name(secondary_target) not in enemy_names:
        enemy_names.append(optional_name(secondary_target))
    enemy_keys = [enemy_key(name) for name in enemy_names]

    prioritized = prioritize_enemies(enemy_names, _names(request.option("priorityTargets")))

    battlefield = match_battlefield(environment)
    risk_eval = evaluate_risk(
        enemy_names,
        environment,
        weather=weather,
        hazard_flags=bridge.get("hazards") if isinstance(bridge.get("hazards"), list) else (),
    )
    allies = bridge.get("allies") if isinstance(bridge.get("allies"), list) else []

    counter_items: List[str] = []
    for key in enemy_keys:
        for item in ENEMY_COUNTERMEASURES.get(key, ()):
            if item not in counter_items:
                counter_items.append(item)
    for item in (battlefield or {}).get("counter_items", ()):
        if item not in counter_items:
            counter_items.append(item)

    # -- equipment --------------------------------------------------------
    inventory = ctx.inventory
    extras = [optional_name(e) for e in stance["extras"] if optional_name(e)]
    weapons = recommend_weapons(
        enemy_names,
        inventory,
        stance=stance["name"],
        tactic=tactic,
        traits=npc.get("traits") if isinstance(npc.get("traits"), Mapping) else None,
        base_primary=stance["primary"],
        base_secondary=stance["secondary"],
    )
    primary = optional_name(request.option("primaryWeapon") or weapons["primary"])
    secondary = optional_name(request.option("secondaryWeapon") or weapons["secondary"])

    required: List[str] = []
    for item in [primary, secondary, "armor", *extras, *weapons["loadout"]]:
        if item and item not in required:
            required.append(item)
    stance_weapons = [display_name(w) for w in [primary, secondary, *extras] if w]

    potions = _names(request.option("potions"))
    missing_equipment = [item for item in required if not has_inventory_item(inventory, item)]
    missing_potions = [item for item in potions if not has_inventory_item(inventory, item)]
    missing_counters = [item for item in counter_items if not has_inventory_item(inventory, item)]

    durability_alerts = build_durability_alerts(extract_durability_entries(ctx), required)
    transitions = determine_stance_transitions(stance["name"], roles, enemy_keys)
    protocols = build_health_protocols(roles, backup_plan, allies)

    # -- steps ------------------------------------------------------------
    steps = []

    if missing_equipment:
        prepare = (
            f"Acquire combat gear ({format_requirement_list(missing_equipment)}) "
            f"and equip before engaging {target}."
        )
    else:
        prepare = (
            "Equip enchanted weapons, shields, armor, and carry potions or golden apples "
            f"before engaging {target}."
        )
    steps.append(
        create_step(
            title="Prepare",
            type="preparation",
            description=prepare,
            metadata={
                "equipment": required,
                "missing": missing_equipment,
                "optimalWeapons": weapons["matches"],
            },
        )
    )

    if weapons["matches"]:
        parts = []
        for match in weapons["matches"]:
            availability = "" if match["available"] else " (retrieve or craft first)"
            parts.append(
                f"{display_name(match['weapon'])} vs "
                f"{format_list([display_name(e) for e in match['enemies']])}{availability}."
            )
        steps.append(
            create_step(
                title="Align weapons to targets",
                type="strategy",
                description=" ".join(parts),
                metadata={"matches": weapons["matches"]},
            )
        )

    if potions:
        if missing_potions:
            buff = f"Brew or retrieve potions ({format_requirement_list(missing_potions)}) prior to combat."
        else:
            buff = f"Consume or carry potions ({', '.join(potions)}) to gain advantages."
        steps.append(
            create_step(
                title="Buff up",
                type="preparation",
                description=buff,
                metadata={"potions": potions, "missing": missing_potions},
            )
        )

    if request.option("traps"):
        steps.append(
            create_step(
                title="Set traps",
                type="preparation",
                description=f"Deploy traps or defensive structures before provoking {target}.",
                metadata={"traps": request.option("traps")},
            )
        )

    if counter_items:
        summary = format_requirement_list(counter_items)
        if missing_counters:
            counter = f"Secure specialized countermeasures ({summary}) before engaging."
        else:
            counter = f"Equip specialized countermeasures ({summary}) to neutralize enemy abilities."
        steps.append(
            create_step(
                title="Prepare countermeasures",
                type="preparation",
                description=counter,
                metadata={"counterItems": counter_items, "missing": missing_counters},
            )
        )

    if len(prioritized) > 1:
        priority_text = "; ".join(
            f"{i + 1}. {d['displayName']} - {d['reason']}" for i, d in enumerate(prioritized)
        )
    else:
        first = prioritized[0]["displayName"] if prioritized else display_name(target)
        priority_text = f"Focus on eliminating {first} quickly."
    steps.append(
        create_step(
            title="Prioritize threats",
            type="strategy",
            description=priority_text,
            metadata={
                "priority": [
                    {"enemy": d["displayName"], "priority": d["priority"], "reason": d["reason"]}
                    for d in prioritized
                ]
            },
        )
    )

    dodges = [{"enemy": d["displayName"], "dodge": d["dodge"]} for d in prioritized]
    steps.append(
        create_step(
            title="Position and dodge",
            type="maneuver",
            description=" ".join(f"{d['enemy']}: {d['dodge']}" for d in dodges),
            metadata={"dodges": dodges},
        )
    )

    stance_parts = [
        f"{display_name(stance['name'])} stance: {stance['description']}",
        f"Maintain {stance['engagement_distance']}.",
    ]
    if stance_weapons:
        stance_parts.append(f"Favor {format_list(stance_weapons)} for primary damage.")
    stance_parts.append(stance["squad_advice"])
    steps.append(
        create_step(
            title="Adopt stance",
            type="strategy",
            description=" ".join(stance_parts),
            metadata={
                "stance": stance["name"],
                "engagementDistance": stance["engagement_distance"],
                "preferredWeapons": {"primary": primary, "secondary": secondary, "extras": extras},
            },
        )
    )

    if transitions:
        transition_text = " ".join(
            f"Swap from {display_name(t['from'])} to {display_name(t['to'])} when {t['condition']}."
            for t in transitions
        )
        steps.append(
            create_step(
                title="Plan stance transitions",
                type="adaptation",
                description=f"Monitor combat events and call for replans as needed. {transition_text}",
                metadata={
                    "transitions": transitions,
                    "replanTrigger": "combat_event",
                    "instructions": REPLAN_INSTRUCTION,
                },
            )
        )

    if durability_alerts:
        parts = []
        for alert in durability_alerts:
            if alert["current"] is not None and alert["max"] is not None:
                reading = f"{alert['current']}/{alert['max']}"
            elif alert["current"]:
                reading = f"{alert['current']} durability"
            else:
                reading = "low durability"
            parts.append(f"{display_name(alert['item'])} {alert['level']}: {reading}.")
        steps.append(
            create_step(
                title="Monitor weapon durability",
                type="maintenance",
                description=f"Inspect combat gear durability before each engagement. {' '.join(parts)}",
                metadata={"alerts": durability_alerts},
            )
        )

    protocol_text = " ".join(
        f"{p['actor']} reacts if health {'drops below' if p.get('thresholdAbsolute') else 'falls'} "
        f"{_threshold_text(p)}: {p['action']}."
        for p in protocols
    )
    steps.append(
        create_step(
            title="Stabilize when injured",
            type="contingency",
            description=f"Leverage safety sub-plans when health thresholds are crossed. {protocol_text}",
            metadata={"protocols": protocols, "replan": "combat_update"},
        )
    )

    advice = _condition_advice(time_of_day, weather, enemy_keys, risk_eval["advice"])
    if advice:
        steps.append(
            create_step(
                title="Adapt to conditions",
                type="awareness",
                description=" ".join(advice),
                metadata={"timeOfDay": time_of_day, "weather": weather, "hazards": risk_eval["hazards"]},
            )
        )

    if leader or members:
        squad_parts = []
        if leader:
            squad_parts.append(f"Designate {leader} as squad lead to call focus targets.")
        if flankers:
            squad_parts.append(f"{format_list(flankers)} flank to collapse hostile attention.")
        if cover:
            squad_parts.append(f"{format_list(cover)} provide overwatch and cover fire.")
        if roles:
            squad_parts.append(
                " ".join(
                    f"{r['name']}: {display_name(r['role'])}, {r['summary']} ({r['spacing']})."
                    for r in roles
                )
            )
        squad_parts.append("Sync callouts for focus fire and retreats.")
        steps.append(
            create_step(
                title="Coordinate squad",
                type="coordination",
                description=" ".join(squad_parts),
                metadata={
                    "leader": leader,
                    "flankers": flankers,
                    "cover": cover,
                    "squad": members,
                    "stance": stance["name"],
                    "roles": roles,
                },
            )
        )

    if battlefield:
        steps.append(
            create_step(
                title="Control the battlefield",
                type="maneuver",
                description=battlefield["description"],
                metadata={
                    "environment": environment,
                    "hazards": [*battlefield["hazards"], *risk_eval["hazards"]],
                    "counterItems": list(battlefield["counter_items"]),
                },
            )
        )

    engage_parts = [
        f"Engage {target} near {target_description} using {tactic} tactics "
        "while maintaining spacing to avoid damage."
    ]
    if len(prioritized) > 1:
        engage_parts.append(
            "Eliminate threats following the priority order: "
            f"{', '.join(d['displayName'] for d in prioritized)}."
        )
    engage_parts.append(
        f"Maintain {stance['engagement_distance']} as part of the {display_name(stance['name'])} stance."
    )
    if stance_weapons:
        engage_parts.append(f"Keep {format_list(stance_weapons)} ready for focus targets.")
    steps.append(
        create_step(
            title="Engage",
            type="action",
            description=" ".join(engage_parts),
            metadata={
                "enemyCount": enemy_count,
                "tactic": tactic,
                "priorityOrder": [d["displayName"] for d in prioritized],
            },
        )
    )

    if support:
        steps.append(
            create_step(
                title="Coordinate support",
                type="communication",
                description=f"Coordinate with {display_name(support)} for focus fire or healing as needed.",
                metadata={"support": display_name(support)},
            )
        )

    steps.append(
        create_step(
            title="Secure area",
            type="cleanup",
            description=f"Light up surroundings, eliminate remaining threats, and collect drops from {target}.",
        )
    )
    steps.append(
        create_step(
            title="Fallback plan",
            type="contingency",
            description=f"If overwhelmed, {backup_plan} and regroup before another attempt.",
            metadata={"fallback": backup_plan},
        )
    )

    # -- risks ------------------------------------------------------------
    risks: List[str] = []
    if missing_equipment:
        risks.append("Missing equipment could reduce combat effectiveness.")
    if enemy_count > 3:
        risks.append("Multiple hostiles present, expect extended fight.")
    if "nether" in environment:
        risks.append("Fire and lava hazards require resistance.")
    if time_of_day == "night":
        risks.append("Nighttime reduces visibility and increases hostile spawn rates.")
    if "storm" in weather or "thunder" in weather:
        risks.append("Thunderstorms may summon charged creepers and lightning strikes.")
    elif "rain" in weather:
        risks.append("Rain reduces visibility and can slow movement on uneven terrain.")
    if stance["name"] == "aggressive":
        risks.append("Aggressive stance exposes the leader to burst damage if support lags.")
    if stance["name"] == "stealth":
        risks.append("Breaking stealth early will forfeit the ambush advantage.")
    if missing_counters:
        risks.append("Missing specialized countermeasures leaves you vulnerable to unique enemy abilities.")
    if any(not m["available"] for m in weapons["matches"]):
        risks.append("Optimal weapon enchantments are missing; expect longer time-to-kill on priority targets.")
    if any(a["level"] == "critical" for a in durability_alerts):
        risks.append("Critical durability reported, swap or repair weapons before they break mid-fight.")
    elif any(a["level"] == "low" for a in durability_alerts):
        risks.append("Several weapons are at half durability; carry backups in case they fail mid-combat.")
    risks.extend(d["risk"] for d in prioritized if d.get("risk"))
    for hazard in [*(battlefield or {}).get("hazards", ()), *risk_eval["hazards"]]:
        message = HAZARD_RISK_MESSAGES.get(normalize_item_name(hazard))
        risks.append(message or f"Environmental hazard: {display_name(hazard)} may disrupt combat.")

    # -- notes ------------------------------------------------------------
    notes: List[str] = []
    if request.option("lootPriority"):
        notes.append(f"Collect priority loot: {request.option('lootPriority')}.")
    if request.option("spawnControl"):
        notes.append(f"Disable spawner at {describe_target(request.option('spawnControl'))} if possible.")
    if battlefield:
        notes.append(f"Battlefield control guidance: {battlefield['description']}")
    if time_of_day:
        notes.append(f"Time of day: {display_name(time_of_day)}.")
    if weather:
        notes.append(f"Weather: {display_name(weather)}.")
    if weapons["matches"]:
        counters = "; ".join(
            f"{display_name(m['weapon'])} vs {format_list([display_name(e) for e in m['enemies']])}"
            for m in weapons["matches"]
        )
        notes.append(f"Weapon counters: {counters}.")
    if transitions:
        queued = "; ".join(
            f"{display_name(t['from'])} -> {display_name(t['to'])} when {t['condition']}" for t in transitions
        )
        notes.append(f"Stance transitions queued: {queued}.")
    triggers = "; ".join(f"{p['actor']} -> {p['action']} @ {_threshold_text(p, ' HP')}" for p in protocols)
    notes.append(f"Health triggers: {triggers}.")
    if durability_alerts:
        readings = "; ".join(
            f"{display_name(a['item'])} {a['level']}" + (f" ({a['current']}/{a['max']})" if a["max"] else "")
            for a in durability_alerts
        )
        notes.append(f"Durability alerts: {readings}.")
    if risk_eval["hazards"]:
        notes.append(f"Hazard flags: {', '.join(display_name(h) for h in risk_eval['hazards'])}.")
    if members:
        squad_notes = []
        if leader:
            squad_notes.append(f"Lead: {leader}")
        if flankers:
            squad_notes.append(f"Flankers: {format_list(flankers)}")
        if cover:
            squad_notes.append(f"Cover: {format_list(cover)}")
        if roles:
            squad_notes.append(
                "Assignments: " + ", ".join(f"{r['name']}={display_name(r['role'])}" for r in roles)
            )
        notes.append(f"Squad roles ({display_name(stance['name'])} stance): {'; '.join(squad_notes)}.")

    resources = [
        *required,
        *potions,
        *counter_items,
        *(d["displayName"].lower() for d in prioritized),
        target,
        support,
    ]

    return create_plan(
        task=request,
        summary=f"Defeat {target} near {target_description}.",
        steps=steps,
        estimated_duration=BASE_DURATION_MS + enemy_count * PER_ENEMY_MS,
        resources=resources,
        risks=risks,
        notes=notes,
        metadata={
            "stance": stance["name"],
            "priorityOrder": [d["name"] for d in prioritized],
            "squadRoles": roles,
            "counterItems": counter_items,
            "hazards": risk_eval["hazards"],
        },
    )
