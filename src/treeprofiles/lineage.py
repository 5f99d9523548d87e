# -------------------------------------
# Profile lineage resolution
# -------------------------------------
"""
Select and apply profiles for a file, given a tree of directory profiles.

A parent profile has a description "tree:DIR" and applies to every file
under DIR (the deepest DIR wins).  Its sub-profiles are the profiles named
"PARENT/..."; their description is a brace/glob pattern matched against
each step of the file's path relative to DIR:

    anime         tree:/media/anime
    anime/fma     Fullmetal Alchemist/*/* S01E{08..11}.mkv

For /media/anime/Fullmetal Alchemist/Season 1/Fullmetal Alchemist S01E09.mkv
the steps are "Fullmetal Alchemist", "Fullmetal Alchemist/Season 1" and the
full relative path; "anime" is applied, then "anime/fma" on the last step.

Option values may use the pseudo-properties ${tree-profiles-parent},
${tree-profiles-path} and ${tree-profiles-directory}.

Nothing here is global: profiles, home directory, separator, matcher and
filesystem hooks all travel in a ProfileContext.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

from .braces import iter_braces
from .globs import get_matcher
from .loader import Profile, find_profile

logger = logging.getLogger(__name__)

MAX_PROFILE_DEPTH = 20
TREE_PREFIX = "tree:"
PSEUDO_PROP_PREFIX = "tree-profiles-"


# ============================================================
# Context / result
# ============================================================

@dataclass(frozen=True)
class ProfileContext:
    profiles: tuple[Profile, ...] = ()
    home: Optional[str] = None
    sep: str = "/"
    matcher: str = "builtin"
    locked: frozenset[str] = frozenset()
    use_filedir_conf: bool = False
    config_dirs: tuple[str, ...] = ()
    max_depth: int = MAX_PROFILE_DEPTH
    realpath: Optional[Callable[[str], Optional[str]]] = None
    exists: Callable[[str], bool] = os.path.exists
    isdir: Callable[[str], bool] = os.path.isdir

    def __post_init__(self):
        # fail on a bad matcher/separator now, not at the first match
        get_matcher(self.matcher, self.sep)

    @property
    def match(self) -> Callable[[str, str], bool]:
        return get_matcher(self.matcher, self.sep)


@dataclass
class Resolution:
    parent: str
    child: str
    props: dict[str, str]
    applied: list[str] = field(default_factory=list)
    entries: list[tuple[str, str, str]] = field(default_factory=list)  # (profile, key, value)

    def add(self, name: str, assignments: list[tuple[str, str]]) -> None:
        self.applied.append(name)
        self.entries.extend((name, k, v) for k, v in assignments)

    @property
    def options(self) -> list[tuple[str, str]]:
        return [(k, v) for _, k, v in self.entries]

    def effective(self) -> dict[str, str]:
        """Final value of each option (later assignments win)."""
        return dict(self.options)

    def to_table(self) -> dict[str, Any]:
        return {"columns": ["profile", "option", "value"], "rows": [list(e) for e in self.entries]}


# ============================================================
# Paths
# ============================================================

def home_directory(environ: Mapping[str, str] | None = None) -> str | None:
    env = os.environ if environ is None else environ
    return env.get("HOME") or env.get("USERPROFILE") or None


def expand_home(path: str, home: str | None, sep: str = "/") -> str:
    """Expand a leading "~/" (other "~" forms are left alone)."""
    if path.startswith("~" + sep):
        if home:
            return home + path[1:]
        logger.warning("Failed to get home directory -- neither $HOME nor $USERPROFILE is set")
    return path


def join_path(base: str, path: str, sep: str = "/") -> str:
    if not base or path.startswith(sep):
        return path
    return base.rstrip(sep) + sep + path


def child_relpath(
    path: str,
    parent: str,
    sep: str = "/",
    realpath: Callable[[str], Optional[str]] | None = None,
) -> str | None:
    """
    Like os.path.relpath(), but None when path is not located under parent,
    and "." when both are the same.
    """
    if realpath is not None:
        path = realpath(path)
        parent = realpath(parent)
    if path is None or parent is None:
        return None

    base = parent.rstrip(sep)
    if path == parent or (base and path == base):
        return "."
    if path.startswith(base + sep):
        return path[len(base) + 1:]
    return None


def walk_path(path: str, sep: str = "/") -> Iterator[str]:
    """Yield every leading part of path ending before a separator, then path."""
    i = path.find(sep)
    while i != -1:
        yield path[:i]
        i = path.find(sep, i + 1)
    yield path


# ============================================================
# Lineage
# ============================================================

def find_lineage(ctx: ProfileContext, fullpath: str) -> tuple[Profile, str] | None:
    """
    Find the parent profile whose tree contains fullpath.

    Returns (parent, child-path), child-path being relative to the tree;
    the shortest child-path wins, ties go to the first profile.
    """
    logger.info("Searching for parent profile of %s", fullpath)
    best: tuple[Profile, str] | None = None

    for profile in ctx.profiles:
        desc = profile.desc
        if not desc or not desc.startswith(TREE_PREFIX):
            continue
        directory = expand_home(desc[len(TREE_PREFIX):], ctx.home, ctx.sep)
        logger.debug("Trying %s (%s)", profile.name, directory)
        child = child_relpath(fullpath, directory, ctx.sep, ctx.realpath)
        if child is None:
            continue
        logger.debug("Profile matches as a parent")
        if best is not None and not len(child) < len(best[1]):
            logger.debug("Match is not better than previous candidate")
        else:
            best = (profile, child)

    return best


def pseudo_props(parent: Profile, child: str, sep: str = "/") -> dict[str, str]:
    directory = child.rpartition(sep)[0].rstrip(sep)
    return {
        "parent": parent.name,
        "path": child,
        "directory": directory or ".",
    }


def expand_pseudo_props(value: str, props: Mapping[str, str]) -> str:
    for name, prop in props.items():
        value = value.replace("${" + PSEUDO_PROP_PREFIX + name + "}", prop)
    return value


# ============================================================
# Application
# ============================================================

def apply_local_profile(
    ctx: ProfileContext,
    profile: Profile,
    props: Mapping[str, str],
    depth: int = 0,
) -> list[tuple[str, str]]:
    """
    Return the option assignments a profile makes for the current file.

    "profile=NAME" pulls in another profile, "no-foo" means "foo=no",
    and locked options are left untouched.
    """
    if depth > ctx.max_depth:
        logger.error("Profile inclusion too deep.")
        return []
    depth += 1
    logger.debug("Locally applying profile %r (depth %d)", profile.name, depth)

    out: list[tuple[str, str]] = []
    for key, value in profile.options:
        if key == "profile":
            sub = find_profile(ctx.profiles, value)
            if sub is None:
                logger.error("Unknown profile %r.", value)
                continue
            logger.debug("Locally including profile %r", value)
            out.extend(apply_local_profile(ctx, sub, props, depth))
            continue

        if key.startswith("no-"):
            key, value = key[3:], "no"
        value = expand_pseudo_props(value, props)

        if key in ctx.locked:
            logger.info("Option %s was set on command-line -- leaving it as-is", key)
            continue
        logger.debug("Locally setting %s = %r", key, value)
        out.append((key, value))

    return out


def description_matches(desc: str, candidate: str, match: Callable[[str, str], bool]) -> bool:
    """Brace-expand desc, then glob-match each result against candidate."""
    return any(match(glob, candidate) for glob in iter_braces(desc))


def subprofiles(ctx: ProfileContext, parent: Profile) -> list[Profile]:
    prefix = parent.name + "/"
    return [p for p in ctx.profiles if p.name.startswith(prefix)]


def matching_subprofiles(ctx: ProfileContext, parent: Profile, step: str) -> Iterator[Profile]:
    """Sub-profiles of parent whose description matches step (each at most once)."""
    match = ctx.match
    for profile in subprofiles(ctx, parent):
        if profile.desc is None:
            continue
        logger.debug("Testing against %s (%r)", profile.name, profile.desc)
        if description_matches(profile.desc, step, match):
            yield profile


def apply_profiles(
    ctx: ProfileContext,
    parent: Profile,
    child: str,
    props: Mapping[str, str],
) -> Resolution:
    """Apply a parent profile, then its matching sub-profiles step by step."""
    res = Resolution(parent=parent.name, child=child, props=dict(props))

    logger.info("Applying profile %s", parent.name)
    res.add(parent.name, apply_local_profile(ctx, parent, props))

    for profile in subprofiles(ctx, parent):
        if profile.desc is None:
            logger.warning("Profile %s is lacking profile-desc -- skipping", profile.name)

    for step in walk_path(child, ctx.sep):
        logger.debug("Checking for profiles matching %r", step)
        for profile in matching_subprofiles(ctx, parent, step):
            logger.info("Applying profile %s", profile.name)
            res.add(profile.name, apply_local_profile(ctx, profile, props))

    return res


def _has_filedir_conf(ctx: ProfileContext, fullpath: str) -> bool:
    dirname, _, filename = fullpath.rpartition(ctx.sep)
    if ctx.exists(join_path(dirname, "mpv.conf", ctx.sep)):
        logger.info("directory-specific configuration file found -- quitting")
        return True
    file_confname = filename + ".conf"
    for d in (dirname, *ctx.config_dirs):
        if ctx.exists(join_path(d, file_confname, ctx.sep)):
            logger.info("file-specific configuration file found -- quitting")
            return True
    return False


def resolve(ctx: ProfileContext, path: str, cwd: str | None = None) -> Resolution | None:
    """
    Work out every option to apply for the file at path.

    Returns None when the path is a directory, lies outside every tree, or
    (with use_filedir_conf) has its own configuration file.
    """
    fullpath = join_path(cwd or "", path, ctx.sep)

    if ctx.isdir(fullpath):
        logger.info("This is a directory -- skipping")
        return None

    lineage = find_lineage(ctx, fullpath)
    if lineage is None:
        logger.info("No parent profile found -- exiting")
        return None
    parent, child = lineage

    if ctx.use_filedir_conf and _has_filedir_conf(ctx, fullpath):
        return None

    return apply_profiles(ctx, parent, child, pseudo_props(parent, child, ctx.sep))
