# src/domain/combat.py
"""
Combat reference tables: enemy threat profiles, countermeasures, weapon
matchups, stances, squad roles, battlefield profiles and defensive setups.

Enemy keys are table keys ("charged_creeper"); use `get_enemy_profile` to
resolve free-form names.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from .lookup import lookup_entry, table_key


DURABILITY_CRITICAL_THRESHOLD = 0.25
DURABILITY_LOW_THRESHOLD = 0.50

HEALTH_CRITICAL_THRESHOLD = 0.25
HEALTH_LOW_THRESHOLD = 0.35
HEALTH_HEALER_THRESHOLD = 0.50
HEALTH_ALLY_THRESHOLD = 0.30

DEFAULT_PRIMARY_WEAPON = "sword"
DEFAULT_SECONDARY_WEAPON = "shield"
DEFAULT_ARMOR = "armor"
DEFAULT_GUARD_STANCE = "defensive"


def _enemy(priority: int, reason: str, dodge: str, risk: str) -> Dict[str, Any]:
    return {"priority": priority, "reason": reason, "dodge": dodge, "risk": risk}


ENEMY_PROFILES: Mapping[str, Mapping[str, Any]] = {
    "charged_creeper": _enemy(
        1,
        "Explosion is instantly lethal in close quarters.",
        "Pepper with ranged attacks and retreat before detonation.",
        "Charged creeper blast radius will obliterate armor and terrain.",
    ),
    "creeper": _enemy(
        1,
        "Explodes for massive burst damage.",
        "Keep 6-block distance, strike, then backpedal to avoid the fuse.",
        "Explosion can be fatal and destroy nearby structures.",
    ),
    "wither_skeleton": _enemy(
        1,
        "Inflicts wither effect and high melee damage.",
        "Use shield blocks and strafe to avoid their sweeping attacks.",
        "Wither effect drains health rapidly if multiple hits land.",
    ),
    "ghast": _enemy(
        1,
        "Fireballs deal splash damage and knockback over voids.",
        "Strafe laterally and reflect fireballs with melee swings or arrows.",
        "Fireball knockback can throw you into lava or off ledges.",
    ),
    "evoker": _enemy(
        1,
        "Summons vex and fang attacks if left alive.",
        "Close distance quickly, circle around fangs, and burst them down.",
        "Vex summons overwhelm unprepared fighters quickly.",
    ),
    "blaze": _enemy(
        2,
        "Ranged fireballs ignite and stagger combatants.",
        "Strafe between fireball volleys and use cover while closing in.",
        "Sustained fire damage requires fire resistance or constant dodging.",
    ),
    "cave_spider": _enemy(
        2,
        "Applies poison on hit and moves unpredictably.",
        "Block tunnel entries and backstep during leap attacks.",
        "Poison stacks can be lethal without milk or regeneration.",
    ),
    "enderman": _enemy(
        2,
        "High damage teleporting strikes once provoked.",
        "Fight under a two-block shelter and avoid prolonged eye contact.",
        "Teleporting hits bypass shields if player is exposed.",
    ),
    "wither": _enemy(
        1,
        "Boss-level destruction and wither skull projectiles.",
        "Use cover to block skulls, strafe constantly, and drink milk to clear wither.",
        "Wither explosions devastate terrain and health rapidly.",
    ),
    "elder_guardian": _enemy(
        1,
        "Mining fatigue beams hinder escape and combat.",
        "Break line of sight behind blocks to interrupt the laser.",
        "Mining fatigue prevents quick retreat or potion brewing underwater.",
    ),
    "guardian": _enemy(
        2,
        "High ranged laser damage underwater.",
        "Use cover pillars to reset laser charge and strafe underwater.",
        "Continuous beam damage stacks quickly without cover.",
    ),
    "skeleton": _enemy(
        2,
        "Accurate ranged attacks chip health from afar.",
        "Strafe side-to-side and close the gap to disable bow fire.",
        "Arrow fire can knock you into hazards if ignored.",
    ),
    "pillager": _enemy(
        2,
        "Crossbow bolts penetrate shields when reloading.",
        "Use shield timing and strafe between reloads to flank them.",
        "Bolts cause heavy knockback when fired in volleys.",
    ),
    "vindicator": _enemy(
        2,
        "Axe swings ignore shields and deal burst damage.",
        "Backstep out of swing range, then counterattack while they recover.",
        "Shield-ignoring axes can drop health fast at close range.",
    ),
    "witch": _enemy(
        1,
        "Throws harmful splash potions and self-heals.",
        "Approach in zigzags to avoid potions and burst with melee or arrows.",
        "Lingering poison and weakness potions prolong fights dangerously.",
    ),
    "ravager": _enemy(
        1,
        "Massive charge attacks break defenses and deal heavy damage.",
        "Side-step charges and attack from the flanks after it lunges.",
        "Charge knockback can launch fighters into hazards.",
    ),
    "spider": _enemy(
        3,
        "Fast leaps can interrupt positioning.",
        "Maintain vertical advantage or backpedal during leap windup.",
        "Leap knockback can push you off ledges in caves.",
    ),
    "zombie": _enemy(
        4,
        "Slow melee threat but swarms overwhelm.",
        "Kite backwards, using knockback to keep distance from the group.",
        "Large packs can corner you if spacing is lost.",
    ),
    "husk": _enemy(
        3,
        "Applies hunger effect on hit.",
        "Circle strafe to avoid swing range and counter when exposed.",
        "Hunger drains food, reducing regeneration mid-fight.",
    ),
    "drowned": _enemy(
        3,
        "Can throw tridents for burst ranged damage.",
        "Dive under trident arcs and close distance quickly when they throw.",
        "Trident hits can be lethal without armor.",
    ),
    "stray": _enemy(
        2,
        "Applies slowness arrows making dodging harder.",
        "Use cover and shields, then rush before additional arrows land.",
        "Slowness makes retreat difficult in open biomes.",
    ),
    "hoglin": _enemy(
        2,
        "Charges deal high knockback and damage.",
        "Sidestep charges and counterattack while it recoils.",
        "Knockback can send you into lava in the Nether.",
    ),
    "piglin_brute": _enemy(
        1,
        "Massive melee damage without cooldown.",
        "Use shields and sprint strafe to avoid consecutive hits.",
        "Two hits can defeat even armored fighters.",
    ),
    "zoglin": _enemy(
        2,
        "Aggressive knockback even to armored players.",
        "Circle strafe and strike after it lunges past you.",
        "Knockback can cause fall damage or lava spills.",
    ),
    "phantom": _enemy(
        3,
        "Aerial dives harass from above when sleep deprived.",
        "Look up and strafe when they swoop, striking during their dive path.",
        "Repeated dives add chip damage while other threats engage.",
    ),
}

DEFAULT_ENEMY_PROFILE: Mapping[str, Any] = _enemy(
    4,
    "Standard hostile threat, monitor but lower urgency.",
    "Circle strafe to reduce incoming hits and retreat if pressure mounts.",
    "Unknown enemy behavior, remain alert for special attacks.",
)

ENEMY_COUNTERMEASURES: Mapping[str, Tuple[str, ...]] = {
    "charged_creeper": ("blast protection armor", "bow"),
    "creeper": ("blast protection armor", "shield"),
    "wither_skeleton": ("milk bucket", "smite sword"),
    "ghast": ("bow", "fire resistance potion"),
    "evoker": ("milk bucket", "bow"),
    "blaze": ("fire resistance potion", "bow"),
    "cave_spider": ("milk bucket", "instant health potion"),
    "enderman": ("pumpkin helmet", "looting sword"),
    "wither": ("milk bucket", "regeneration potion", "smite sword"),
    "elder_guardian": ("water breathing potion", "milk bucket", "doors"),
    "guardian": ("depth strider boots", "water breathing potion", "doors"),
    "skeleton": ("shield", "projectile protection armor"),
    "pillager": ("shield", "projectile protection armor"),
    "vindicator": ("shield", "strength potion"),
    "witch": ("milk bucket", "instant health potion"),
    "ravager": ("shield", "strength potion"),
    "spider": ("sweeping edge sword",),
    "zombie": ("smite sword",),
    "husk": ("milk bucket",),
    "drowned": ("shield", "respiration helmet"),
    "stray": ("shield", "milk bucket"),
    "hoglin": ("fire resistance potion", "shield"),
    "piglin_brute": ("netherite armor", "shield"),
    "zoglin": ("shield", "feather falling boots"),
    "phantom": ("bow", "slow falling potion"),
}

WEAPON_MATCHUPS: Tuple[Mapping[str, Any], ...] = (
    {
        "enemies": ("zombie", "husk", "drowned", "skeleton", "stray", "wither_skeleton", "wither"),
        "weapon": "smite sword",
        "reason": "Smite enchantments amplify damage to undead foes.",
    },
    {
        "enemies": ("spider", "cave_spider"),
        "weapon": "bane of arthropods sword",
        "reason": "Bane of Arthropods slows and bursts spider mobs.",
    },
    {
        "enemies": ("creeper", "charged_creeper"),
        "weapon": "bow",
        "reason": "Ranged focus avoids blast radius while detonating creepers safely.",
    },
    {
        "enemies": ("blaze", "ghast"),
        "weapon": "power bow",
        "reason": "Strong bows counter airborne fire mobs from range.",
    },
    {
        "enemies": ("guardian", "elder_guardian"),
        "weapon": "impaling trident",
        "reason": "Impaling tridents shred aquatic guardians underwater.",
    },
    {
        "enemies": ("ravager", "piglin_brute", "zoglin", "hoglin"),
        "weapon": "netherite axe",
        "reason": "High damage axes break through armored brutes quickly.",
    },
    {
        "enemies": ("phantom",),
        "weapon": "crossbow",
        "reason": "Crossbows pierce swooping phantoms during flight.",
    },
)

SQUAD_ROLE_ORDER = ("leader", "tank", "dps", "healer", "scout")

SQUAD_ROLE_PROFILES: Mapping[str, Mapping[str, str]] = {
    "leader": {
        "summary": "Calls focus targets, synchronizes stance swaps, and keeps formation centered.",
        "spacing": "midline with line of sight to every member",
    },
    "tank": {
        "summary": "Holds aggro up close, shielding allies and pinning priority mobs.",
        "spacing": "front rank within shield bash range",
    },
    "dps": {
        "summary": "Maintains pressure on priority targets and pivots to new threats on command.",
        "spacing": "offset flank providing burst windows",
    },
    "healer": {
        "summary": (
            "Keeps regeneration, potions, or totems ready and calls for retreats "
            "when healing cooldowns lapse."
        ),
        "spacing": "protected backline within 5 blocks of tank",
    },
    "scout": {
        "summary": "Screens for reinforcements, marks hazards, and intercepts flankers.",
        "spacing": "wide arcs 6-8 blocks out to spot ambushes",
    },
}

SUPPORT_ROLE_PROFILE: Mapping[str, str] = {
    "summary": "Provides support as needed.",
    "spacing": "maintain flexible positioning",
}


COMBAT_STANCES: Mapping[str, Mapping[str, Any]] = {
    "aggressive": {
        "name": "aggressive",
        "description": "Lead the charge and overwhelm targets with burst damage while keeping momentum.",
        "engagement_distance": "close-range pressure within 2-3 blocks",
        "primary": "axe",
        "secondary": "shield",
        "extras": ("sword",),
        "squad_advice": "Point leader rushes the highest priority threat while allies collapse from both flanks.",
    },
    "defensive": {
        "name": "defensive",
        "description": (
            "Hold ground with shield blocks and controlled counterattacks to mitigate incoming damage."
        ),
        "engagement_distance": "tight formation within 3-4 blocks of allies",
        "primary": "sword",
        "secondary": "shield",
        "extras": ("totem of undying",),
        "squad_advice": "Leader anchors the line; flankers focus on intercepting threats targeting the backline.",
    },
    "guard": {
        "name": "guard",
        "description": (
            "Protect objectives by rotating between chokepoints and intercepting attackers "
            "before they breach."
        ),
        "engagement_distance": "mid-range control between 4-5 blocks",
        "primary": "sword",
        "secondary": "shield",
        "extras": ("crossbow",),
        "squad_advice": "Leader calls rotations; one ally watches rear arcs while another provides cover fire.",
    },
    "ranged": {
        "name": "ranged",
        "description": "Keep distance and wear down enemies with arrows or crossbow bolts while kiting.",
        "engagement_distance": "standoff range at 6-10 blocks",
        "primary": "bow",
        "secondary": "sword",
        "extras": ("crossbow",),
        "squad_advice": (
            "Leader tags targets; flankers push to create crossfire while support maintains cover fire."
        ),
    },
    "stealth": {
        "name": "stealth",
        "description": "Approach unseen, strike from cover, then disengage before the enemy can respond.",
        "engagement_distance": "ambush range within 4 blocks from concealment",
        "primary": "sword",
        "secondary": "bow",
        "extras": ("potion of invisibility",),
        "squad_advice": "Leader signals synchronized strikes while allies cut off escape paths quietly.",
    },
}

# Matched by keyword against the normalized environment string, first hit wins.
BATTLEFIELD_PROFILES: Tuple[Mapping[str, Any], ...] = (
    {
        "keywords": ("nether",),
        "description": (
            "Use fireproof blocks for cover and keep fire resistance active while avoiding lava edges."
        ),
        "hazards": ("Lava pools, fire damage, and narrow ledges increase knockback danger.",),
        "counter_items": ("fire resistance potion",),
    },
    {
        "keywords": ("ocean", "underwater", "sea"),
        "description": (
            "Maintain water breathing and night vision while using blocks or doors to reset guardian lasers."
        ),
        "hazards": ("Limited mobility and drowning risk if respiration expires.",),
        "counter_items": ("water breathing potion", "doors", "night vision potion"),
    },
    {
        "keywords": ("end",),
        "description": (
            "Place water buckets or scaffolding to prevent void falls and keep slow falling "
            "active when near ledges."
        ),
        "hazards": ("Void falls are lethal and endermen aggro easily on open platforms.",),
        "counter_items": ("slow falling potion", "water bucket"),
    },
    {
        "keywords": ("cave", "ravine", "mine"),
        "description": (
            "Light choke points, clear drop hazards, and fight from secure tunnels to avoid surprise attacks."
        ),
        "hazards": ("Low visibility and uneven terrain enable ambushes.",),
        "counter_items": ("torches", "blocks"),
    },
)

HAZARD_RISK_MESSAGES: Mapping[str, str] = {
    "fire": "Fire hazard present, maintain fire resistance and extinguishers.",
    "lava": "Lava exposure nearby, carry blocks and avoid knockback toward edges.",
    "drowning": "Underwater combat risks drowning without respiration gear.",
    "poison": "Poison damage possible, keep antidotes or milk ready.",
    "mining fatigue": "Mining fatigue beams can prevent emergency escapes, break line of sight often.",
    "knockback": "High knockback threats, anchor near solid walls to avoid being launched.",
    "lightning": "Lightning strikes likely during storms, avoid tall metal structures.",
    "void fall": "Void exposure, any knockback could be fatal without slow falling.",
}


# ---------------------------------------------------------------------------
# Defensive systems (guard duty)
# ---------------------------------------------------------------------------

FORTIFICATION_OPTIONS: Mapping[str, Mapping[str, Any]] = {
    "basic": {
        "materials": ("cobblestone", "wood planks"),
        "description": "Simple wall or barricade for basic protection",
        "time": "5-10 minutes",
    },
    "reinforced": {
        "materials": ("stone bricks", "iron bars", "iron door"),
        "description": "Reinforced walls with secure entry points",
        "time": "15-20 minutes",
    },
    "advanced": {
        "materials": ("obsidian", "iron blocks", "redstone", "dispensers"),
        "description": "Advanced fortification with traps and automated defenses",
        "time": "30+ minutes",
    },
    "lighting": {
        "materials": ("torches", "glowstone", "sea lanterns"),
        "description": "Perimeter lighting to prevent mob spawns",
        "time": "5 minutes",
    },
}

ALARM_SYSTEMS: Mapping[str, Mapping[str, Any]] = {
    "bell": {
        "materials": ("bell",),
        "range": "Close range audible alert",
        "description": "Simple bell mechanism for manual alerts",
    },
    "redstone": {
        "materials": ("redstone", "note blocks", "observers"),
        "range": "Configurable range with repeaters",
        "description": "Automated redstone alarm triggered by movement",
    },
    "tripwire": {
        "materials": ("tripwire hooks", "string", "redstone"),
        "range": "Perimeter detection",
        "description": "Tripwire perimeter that triggers alerts on breach",
    },
}

PERIMETER_DEFENSE: Mapping[str, Mapping[str, Any]] = {
    "walls": {
        "materials": ("cobblestone", "stone bricks"),
        "height": "3-4 blocks minimum",
        "description": "Solid walls to prevent mob entry",
    },
    "moat": {
        "materials": ("water buckets", "lava buckets"),
        "depth": "2-3 blocks",
        "description": "Liquid moat to slow or damage approaching mobs",
    },
    "traps": {
        "materials": ("dispensers", "arrows", "lava", "redstone"),
        "description": "Automated traps for hostile mobs",
    },
    "lighting": {
        "materials": ("torches", "glowstone"),
        "spacing": "Every 8-10 blocks",
        "description": "Prevent hostile mob spawns in defended area",
    },
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def enemy_key(name: Any) -> str:
    """Table key for a free-form enemy name; unknown enemies keep their own key."""
    found = lookup_entry(ENEMY_PROFILES, name)
    return found[0] if found else table_key(name)


def get_enemy_profile(name: Any) -> Mapping[str, Any]:
    found = lookup_entry(ENEMY_PROFILES, name)
    return found[1] if found else DEFAULT_ENEMY_PROFILE


def get_stance(name: Any) -> Optional[Mapping[str, Any]]:
    key = table_key(name)
    return COMBAT_STANCES.get(key)


def match_battlefield(environment: str) -> Optional[Mapping[str, Any]]:
    text = (environment or "").lower()
    for profile in BATTLEFIELD_PROFILES:
        if any(keyword in text for keyword in profile["keywords"]):
            return profile
    return None
