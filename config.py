import math
from dataclasses import dataclass, field
from typing import Dict, Optional


class ConfigError(ValueError):
    """Raised on a malformed agent configuration string or value."""


def parse_pairs(args):
    """Split "k1=v1 k2=v2 ..." into a dict, later keys overwrite earlier ones"""
    meta = {}
    for pair in args.split():
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigError("expected key=value, got %r" % pair)
        meta[key] = value
    return meta


def parse_float(key, text):
    try:
        value = float(text)
    except ValueError:
        raise ConfigError("%s must be numeric, got %r" % (key, text)) from None
    if not math.isfinite(value):
        raise ConfigError("%s must be a finite number, got %r" % (key, text))
    return value


def parse_int(key, text):
    # "42" and "4.2e1" both work, fractions are truncated toward zero
    try:
        return int(text)
    except ValueError:
        pass
    return int(parse_float(key, text))


# typed keys and how their strings are coerced
NUMERIC_KEYS = {
    "seed": parse_int,
    "alpha": parse_float,
}


@dataclass
class AgentConfig:
    name: str = "unknown"
    role: str = "unknown"
    seed: Optional[int] = None
    alpha: float = 0.0
    init: Optional[str] = None
    load: Optional[str] = None
    save: Optional[str] = None
    meta: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_string(cls, args="", defaults=""):
        """Parse defaults then args, failing on the first invalid key."""
        config = cls()
        meta = parse_pairs("name=unknown role=unknown " + defaults)
        meta.update(parse_pairs(args))
        for key, value in meta.items():
            config.set(key, value)
        return config

    def set(self, key, value):
        if key in NUMERIC_KEYS:
            typed = NUMERIC_KEYS[key](key, value)
        else:
            typed = value
        if key in ("name", "role", "seed", "alpha", "init", "load", "save"):
            setattr(self, key, typed)
        self.meta[key] = value

    def update(self, message):
        """Apply a single runtime "key=value" notification."""
        key, sep, value = message.partition("=")
        if not sep or not key:
            raise ConfigError("expected key=value, got %r" % message)
        self.set(key, value)

    def property(self, key):
        try:
            return self.meta[key]
        except KeyError:
            raise ConfigError("missing configuration key %r" % key) from None

    def __contains__(self, key):
        return key in self.meta
