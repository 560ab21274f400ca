"""
Static gesture configuration: class table, slot capacity and key bindings.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from gestures.exceptions import ConfigurationError
from gestures.types import GestureClass

# Contest comparators
COMPARE_AT_LEAST = ">="
COMPARE_GREATER = ">"
COMPARE_ALWAYS = "always"
COMPARATORS = (COMPARE_AT_LEAST, COMPARE_GREATER, COMPARE_ALWAYS)

# What a continuous class does with an observation below its threshold
PROGRESS_TRACK = "track"
PROGRESS_HOLD = "hold"
PROGRESS_ZERO = "zero"
PROGRESS_POLICIES = (PROGRESS_TRACK, PROGRESS_HOLD, PROGRESS_ZERO)

DEFAULT_MAX_CONCURRENT_ACTORS = 6  # bodies the sensor can track at once


@dataclass(frozen=True)
class ContestRule:
    """
    Tie-break against a rival class.

    Consulted only when the rival is latched too. With '>=' the owning class
    fires only if its confidence is at least the rival's, otherwise it yields.
    """
    rival: GestureClass
    comparator: str = COMPARE_AT_LEAST

    def allows(self, own_confidence: float, rival_confidence: float) -> bool:
        if self.comparator == COMPARE_ALWAYS:
            return True
        if self.comparator == COMPARE_GREATER:
            return own_confidence > rival_confidence
        return own_confidence >= rival_confidence


@dataclass(frozen=True)
class GestureClassConfig:
    gesture: GestureClass
    threshold: float = 0.8
    priority: int = 0
    continuous: bool = False
    aliases: Tuple[str, ...] = ()
    contest: Optional[ContestRule] = None
    clears: Tuple[GestureClass, ...] = ()


DEFAULT_GESTURE_CLASSES = (
    GestureClassConfig(
        GestureClass.PUNCH, threshold=0.8, priority=0, aliases=("PunchStart",),
        contest=ContestRule(GestureClass.SPECIAL_MOVE, COMPARE_AT_LEAST),
        clears=(GestureClass.SPECIAL_MOVE,),
    ),
    GestureClassConfig(
        GestureClass.KICK, threshold=0.5, priority=1, aliases=("KickStart",),
    ),
    # TODO: give the special move a real comparator against Punch once the
    # intended tie-break is confirmed; 'always' lets it fire whenever reached.
    GestureClassConfig(
        GestureClass.SPECIAL_MOVE, threshold=0.8, priority=2, aliases=("HadukStart",),
        contest=ContestRule(GestureClass.PUNCH, COMPARE_ALWAYS),
        clears=(GestureClass.PUNCH,),
    ),
    GestureClassConfig(
        GestureClass.JUMPING_JACKS, threshold=0.8, priority=3,
    ),
    # fed by LeanDetector, which reports detected leans at confidence 1.0
    GestureClassConfig(GestureClass.LEAN_LEFT, threshold=0.5, priority=4),
    GestureClassConfig(GestureClass.LEAN_RIGHT, threshold=0.5, priority=5),
)

# Keys sent for player 1; other players get no bindings unless configured
DEFAULT_KEY_BINDINGS = {
    0: {
        GestureClass.PUNCH: 'k',
        GestureClass.KICK: 'i',
        GestureClass.SPECIAL_MOVE: 'z',
        GestureClass.JUMPING_JACKS: 'w',
        GestureClass.LEAN_LEFT: 'a',
        GestureClass.LEAN_RIGHT: 'd',
    },
}


@dataclass
class EngineConfig:
    """Configuration for the arbitration engine and its sinks."""

    gesture_classes: Tuple[GestureClassConfig, ...] = DEFAULT_GESTURE_CLASSES
    max_concurrent_actors: int = DEFAULT_MAX_CONCURRENT_ACTORS
    low_confidence_progress: str = PROGRESS_TRACK
    key_bindings: Dict[int, Dict[GestureClass, str]] = field(
        default_factory=lambda: {slot: dict(keys) for slot, keys in DEFAULT_KEY_BINDINGS.items()}
    )

    def __post_init__(self):
        """Validate configuration."""
        self.gesture_classes = tuple(self.gesture_classes)
        if self.max_concurrent_actors <= 0:
            raise ConfigurationError("max_concurrent_actors must be positive")
        if self.low_confidence_progress not in PROGRESS_POLICIES:
            raise ConfigurationError(
                f"low_confidence_progress must be one of {PROGRESS_POLICIES}, "
                f"got {self.low_confidence_progress!r}"
            )
        if not self.gesture_classes:
            raise ConfigurationError("at least one gesture class must be configured")

        seen = set()
        names = {}
        for cfg in self.gesture_classes:
            if cfg.gesture in seen:
                raise ConfigurationError(f"gesture class {cfg.gesture} configured twice")
            seen.add(cfg.gesture)
            if not 0.0 <= cfg.threshold <= 1.0:
                raise ConfigurationError(f"threshold for {cfg.gesture} must be in [0, 1]")
            for name in (cfg.gesture.value,) + tuple(cfg.aliases):
                if name in names and names[name] != cfg.gesture:
                    raise ConfigurationError(f"name {name!r} maps to both {names[name]} and {cfg.gesture}")
                names[name] = cfg.gesture

        for cfg in self.gesture_classes:
            if cfg.contest is not None:
                if cfg.contest.comparator not in COMPARATORS:
                    raise ConfigurationError(
                        f"unknown comparator {cfg.contest.comparator!r} for {cfg.gesture}"
                    )
                if cfg.contest.rival not in seen:
                    raise ConfigurationError(
                        f"{cfg.gesture} contests {cfg.contest.rival}, which is not configured"
                    )
            for other in cfg.clears:
                if other not in seen:
                    raise ConfigurationError(f"{cfg.gesture} clears {other}, which is not configured")

        discrete_ranks = [c.priority for c in self.gesture_classes if not c.continuous]
        if len(discrete_ranks) != len(set(discrete_ranks)):
            raise ConfigurationError("discrete gesture classes need distinct priority ranks")

    def class_config(self, gesture) -> GestureClassConfig:
        for cfg in self.gesture_classes:
            if cfg.gesture == gesture:
                return cfg
        raise KeyError(gesture)

    def name_table(self) -> Dict[str, GestureClassConfig]:
        """Map every accepted classifier name (value or alias) to its class config."""
        table = {}
        for cfg in self.gesture_classes:
            table[cfg.gesture.value] = cfg
            for alias in cfg.aliases:
                table[alias] = cfg
        return table

    def priority_order(self) -> List[GestureClassConfig]:
        """Discrete classes, highest priority first."""
        return sorted(
            (c for c in self.gesture_classes if not c.continuous),
            key=lambda c: c.priority,
        )


def _parse_gesture(name, where):
    try:
        return GestureClass(name)
    except (TypeError, ValueError):
        raise ConfigurationError(f"unknown gesture class {name!r} in {where}") from None


def _parse_int(value, where) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{where} must be an integer, got {value!r}") from None


def _parse_class_entry(entry) -> GestureClassConfig:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"gesture class entry must be an object, got {entry!r}")
    if 'name' not in entry:
        raise ConfigurationError(f"gesture class entry without 'name': {entry!r}")
    gesture = _parse_gesture(entry['name'], 'gesture_classes')

    contest = None
    if entry.get('contest'):
        contest_entry = entry['contest']
        if not isinstance(contest_entry, dict):
            raise ConfigurationError(f"contest of {gesture} must be an object, got {contest_entry!r}")
        contest = ContestRule(
            rival=_parse_gesture(contest_entry.get('rival'), f"contest of {gesture}"),
            comparator=contest_entry.get('comparator', COMPARE_AT_LEAST),
        )

    try:
        return GestureClassConfig(
            gesture=gesture,
            threshold=float(entry.get('threshold', 0.8)),
            priority=int(entry.get('priority', 0)),
            continuous=bool(entry.get('continuous', False)),
            aliases=tuple(entry.get('aliases', ())),
            contest=contest,
            clears=tuple(_parse_gesture(n, f"clears of {gesture}") for n in entry.get('clears', ())),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid entry for {gesture}: {e}") from e


def config_from_dict(data) -> EngineConfig:
    """
    Build an EngineConfig from plain data (e.g. parsed JSON).

    Keys left out fall back to the defaults.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration must be an object, got {data!r}")

    kwargs = {}
    if 'gesture_classes' in data:
        kwargs['gesture_classes'] = tuple(_parse_class_entry(e) for e in data['gesture_classes'])
    if 'max_concurrent_actors' in data:
        kwargs['max_concurrent_actors'] = _parse_int(data['max_concurrent_actors'], 'max_concurrent_actors')
    if 'low_confidence_progress' in data:
        kwargs['low_confidence_progress'] = data['low_confidence_progress']
    if 'key_bindings' in data:
        if not isinstance(data['key_bindings'], dict):
            raise ConfigurationError("key_bindings must map slots to objects")
        bindings = {}
        for slot, keys in data['key_bindings'].items():
            if not isinstance(keys, dict):
                raise ConfigurationError(f"key_bindings[{slot}] must be an object, got {keys!r}")
            bindings[_parse_int(slot, 'key_bindings slot')] = {
                _parse_gesture(name, f"key_bindings[{slot}]"): str(key) for name, key in keys.items()
            }
        kwargs['key_bindings'] = bindings
    return EngineConfig(**kwargs)


def load_config(path) -> EngineConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        EngineConfig

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid values
    """
    path = Path(path)
    try:
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"could not load configuration from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration in {path} must be a JSON object")
    return config_from_dict(data)
