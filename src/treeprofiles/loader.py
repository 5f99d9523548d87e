# -------------------------------------
# Profile store - YAML loading
# -------------------------------------
"""
Load profile definitions from a YAML file.

    settings:
      matcher: builtin          # or "posix"
      separator: "/"
      use-filedir-conf: false
      locked: [sid]             # options never overridden by profiles
      home: /home/me            # instead of $HOME / $USERPROFILE
    profiles:
      anime:
        profile-desc: "tree:~/media/anime"
        options: [alang=jpn, slang=eng]
      anime/fma:
        profile-desc: "Fullmetal Alchemist/*/* S01E{08..11}.mkv"
        options: {sid: 2}

Options keep their order and may be written as a list of "key=value"
strings (a bare "key" means "key=yes"), a list of one-entry mappings, or a
mapping.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


class ProfileConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Profile:
    name: str
    desc: Optional[str] = None
    options: tuple[tuple[str, str], ...] = field(default_factory=tuple)


# Module-level cache for loaded configuration files: path -> (mtime_ns, data)
_CONFIG_CACHE: dict[str, tuple[int, dict[str, Any]]] = {}

_SETTING_KEYS = {"matcher", "separator", "use-filedir-conf", "locked", "home", "config-dirs"}


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a profile YAML file and return the parsed data.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
        ProfileConfigError: If the top level is not a mapping
    """
    path = Path(path)
    path_str = str(path.resolve())
    mtime = path.stat().st_mtime_ns

    cached = _CONFIG_CACHE.get(path_str)
    if cached is not None and cached[0] == mtime:
        return copy.deepcopy(cached[1])

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProfileConfigError(f"'{path}' must contain a mapping at top level")

    logger.debug("Loaded profile configuration from %s", path_str)
    _CONFIG_CACHE[path_str] = (mtime, data)
    return copy.deepcopy(data)


def clear_cache() -> None:
    """Clear the configuration file cache."""
    _CONFIG_CACHE.clear()


# ============================================================
# Options
# ============================================================

def _scalar(v: Any) -> str:
    # YAML turns yes/no into booleans
    if isinstance(v, bool):
        return "yes" if v else "no"
    if v is None:
        return ""
    return str(v)


def _parse_option(name: str, entry: Any) -> tuple[str, str]:
    if isinstance(entry, str):
        key, eq, value = entry.partition("=")
        key = key.strip()
        if not key:
            raise ProfileConfigError(f"profile '{name}': empty option name in {entry!r}")
        return key, (value if eq else "yes")
    if isinstance(entry, dict) and len(entry) == 1:
        ((key, value),) = entry.items()
        return str(key), _scalar(value)
    raise ProfileConfigError(f"profile '{name}': invalid option entry {entry!r}")


def parse_options(name: str, raw: Any) -> tuple[tuple[str, str], ...]:
    """Normalize a profile's options into an ordered tuple of (key, value)."""
    if raw is None:
        return ()
    if isinstance(raw, dict):
        return tuple((str(k), _scalar(v)) for k, v in raw.items())
    if isinstance(raw, list):
        return tuple(_parse_option(name, entry) for entry in raw)
    raise ProfileConfigError(f"profile '{name}': 'options' must be a list or a mapping")


# ============================================================
# Profiles
# ============================================================

def parse_profiles(data: dict[str, Any]) -> list[Profile]:
    """Build Profile objects from a loaded configuration, in file order."""
    raw = data.get("profiles", {})
    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise ProfileConfigError("'profiles' must be a mapping of name -> profile")

    profiles: list[Profile] = []
    for name, body in raw.items():
        name = str(name)
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ProfileConfigError(f"profile '{name}' must be a mapping")
        unknown = set(body) - {"profile-desc", "options"}
        if unknown:
            raise ProfileConfigError(f"profile '{name}': unknown keys {sorted(unknown)}")
        desc = body.get("profile-desc")
        if desc is not None and not isinstance(desc, str):
            raise ProfileConfigError(f"profile '{name}': 'profile-desc' must be a string")
        profiles.append(Profile(name, desc, parse_options(name, body.get("options"))))
    return profiles


def load_profiles(path: str | Path) -> list[Profile]:
    return parse_profiles(load_config(path))


def find_profile(profiles: list[Profile] | tuple[Profile, ...], name: str) -> Profile | None:
    """Return the first profile called name, or None."""
    for p in profiles:
        if p.name == name:
            return p
    return None


_FLAG_WORDS = {"yes": True, "true": True, "no": False, "false": False}


def _flag(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in _FLAG_WORDS:
        return _FLAG_WORDS[value.lower()]
    raise ProfileConfigError(f"'{key}' must be yes/no or true/false, got {value!r}")


def get_settings(data: dict[str, Any]) -> dict[str, Any]:
    """Validated 'settings' section, with lists turned into tuples."""
    settings = data.get("settings") or {}
    if not isinstance(settings, dict):
        raise ProfileConfigError("'settings' must be a mapping")
    unknown = set(settings) - _SETTING_KEYS
    if unknown:
        raise ProfileConfigError(f"unknown settings {sorted(unknown)}")

    out: dict[str, Any] = {}
    if "matcher" in settings:
        out["matcher"] = str(settings["matcher"])
    if "separator" in settings:
        sep = str(settings["separator"])
        if len(sep) != 1:
            raise ProfileConfigError(f"'separator' must be a single character, got {sep!r}")
        out["sep"] = sep
    if "use-filedir-conf" in settings:
        out["use_filedir_conf"] = _flag("use-filedir-conf", settings["use-filedir-conf"])
    if "home" in settings:
        out["home"] = str(settings["home"])
    for key, attr in (("locked", "locked"), ("config-dirs", "config_dirs")):
        if key in settings:
            value = settings[key] or []
            if not isinstance(value, list):
                raise ProfileConfigError(f"'{key}' must be a list")
            out[attr] = tuple(str(v) for v in value)
    return out


def load_context(path: str | Path, **overrides: Any):
    """
    Build a ProfileContext from a YAML file.  Keyword arguments override
    the file's settings (e.g. matcher="posix").
    """
    from .lineage import ProfileContext, home_directory

    data = load_config(path)
    kwargs = get_settings(data)
    kwargs.update(overrides)
    if "home" not in kwargs:
        kwargs["home"] = home_directory()
    if "locked" in kwargs:
        kwargs["locked"] = frozenset(kwargs["locked"])
    return ProfileContext(profiles=tuple(parse_profiles(data)), **kwargs)
