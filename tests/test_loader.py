# -------------------------------------
# Profile store tests
# -------------------------------------
"""
Tests for the YAML profile loader.
"""
import os
import tempfile

import pytest
import yaml

from treeprofiles.loader import (
    Profile,
    ProfileConfigError,
    load_config,
    clear_cache,
    parse_options,
    parse_profiles,
    load_profiles,
    find_profile,
    get_settings,
    load_context,
)


# -------------------------------------
# Test Fixtures
# -------------------------------------

PROFILES_YAML = """
settings:
  matcher: posix
  use-filedir-conf: true
  locked: [sid]
  home: /home/me

profiles:
  anime:
    profile-desc: "tree:~/media/anime"
    options:
      - alang=jpn
      - slang=eng
  anime/fma:
    profile-desc: "Fullmetal Alchemist"
    options:
      sid: 5
      sub-visibility: no
  documentary:
    profile-desc: "tree:/media/documentaries"
    options: [no-sub, fs]
  empty:
"""


def _write(text):
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
        f.write(text)
        return f.name


@pytest.fixture
def profiles_file():
    """Create a temporary profile file for testing."""
    path = _write(PROFILES_YAML)
    yield path
    os.unlink(path)
    clear_cache()


@pytest.fixture
def make_file():
    paths = []

    def make(text):
        path = _write(text)
        paths.append(path)
        return path

    yield make
    for path in paths:
        os.unlink(path)
    clear_cache()


# -------------------------------------
# load_config
# -------------------------------------

class TestLoadConfig:
    """Tests for load_config and its cache."""

    def test_load(self, profiles_file):
        data = load_config(profiles_file)
        assert "profiles" in data
        assert data["settings"]["matcher"] == "posix"

    def test_caching(self, profiles_file, monkeypatch):
        load_config(profiles_file)
        calls = []
        monkeypatch.setattr(yaml, "safe_load", lambda f: calls.append(f) or {})
        assert load_config(profiles_file)["settings"]["matcher"] == "posix"
        assert calls == []

    def test_returns_copy(self, profiles_file):
        first = load_config(profiles_file)
        first["profiles"].clear()
        first["settings"]["matcher"] = "builtin"
        second = load_config(profiles_file)
        assert "anime" in second["profiles"]
        assert second["settings"]["matcher"] == "posix"

    def test_reloads_modified_file(self, profiles_file):
        load_config(profiles_file)
        with open(profiles_file, "w") as f:
            f.write("profiles: {}\n")
        st = os.stat(profiles_file)
        os.utime(profiles_file, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))
        assert load_config(profiles_file) == {"profiles": {}}

    def test_clear_cache(self, profiles_file, monkeypatch):
        load_config(profiles_file)
        clear_cache()
        calls = []
        monkeypatch.setattr(yaml, "safe_load", lambda f: calls.append(f) or {})
        assert load_config(profiles_file) == {}
        assert len(calls) == 1

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/profiles.yml")

    def test_invalid_yaml(self, make_file):
        with pytest.raises(yaml.YAMLError):
            load_config(make_file("profiles: [unclosed"))

    def test_empty_file(self, make_file):
        assert load_config(make_file("")) == {}

    def test_not_a_mapping(self, make_file):
        with pytest.raises(ProfileConfigError, match="mapping at top level"):
            load_config(make_file("- a\n- b\n"))


# -------------------------------------
# options / profiles
# -------------------------------------

class TestParseOptions:
    """Tests for the accepted option spellings."""

    def test_strings(self):
        assert parse_options("p", ["a=1", "b=x=y"]) == (("a", "1"), ("b", "x=y"))

    def test_bare_flag(self):
        assert parse_options("p", ["fs", "no-sub"]) == (("fs", "yes"), ("no-sub", "yes"))

    def test_empty_value(self):
        assert parse_options("p", ["a="]) == (("a", ""),)

    def test_mapping(self):
        assert parse_options("p", {"sid": 5, "fs": True, "sub": False}) == (
            ("sid", "5"), ("fs", "yes"), ("sub", "no"),
        )

    def test_list_of_mappings(self):
        assert parse_options("p", [{"profile": "base"}, {"sid": 2}]) == (
            ("profile", "base"), ("sid", "2"),
        )

    def test_none(self):
        assert parse_options("p", None) == ()

    def test_invalid_entry(self):
        with pytest.raises(ProfileConfigError, match="profile 'p'"):
            parse_options("p", [["a", "b"]])

    def test_empty_name(self):
        with pytest.raises(ProfileConfigError, match="empty option name"):
            parse_options("p", ["=x"])

    def test_invalid_type(self):
        with pytest.raises(ProfileConfigError, match="list or a mapping"):
            parse_options("p", "a=1")


class TestParseProfiles:
    """Tests for parse_profiles, load_profiles and find_profile."""

    def test_order_and_content(self, profiles_file):
        profiles = load_profiles(profiles_file)
        assert [p.name for p in profiles] == ["anime", "anime/fma", "documentary", "empty"]
        assert profiles[0] == Profile("anime", "tree:~/media/anime", (("alang", "jpn"), ("slang", "eng")))
        assert profiles[1].options == (("sid", "5"), ("sub-visibility", "no"))
        assert profiles[2].options == (("no-sub", "yes"), ("fs", "yes"))
        assert profiles[3] == Profile("empty")

    def test_no_profiles(self):
        assert parse_profiles({}) == []
        assert parse_profiles({"profiles": None}) == []

    def test_profiles_not_mapping(self):
        with pytest.raises(ProfileConfigError, match="'profiles' must be a mapping"):
            parse_profiles({"profiles": ["a"]})

    def test_profile_not_mapping(self):
        with pytest.raises(ProfileConfigError, match="profile 'a' must be a mapping"):
            parse_profiles({"profiles": {"a": "tree:/x"}})

    def test_unknown_key(self):
        with pytest.raises(ProfileConfigError, match="unknown keys"):
            parse_profiles({"profiles": {"a": {"desc": "x"}}})

    def test_desc_not_string(self):
        with pytest.raises(ProfileConfigError, match="'profile-desc' must be a string"):
            parse_profiles({"profiles": {"a": {"profile-desc": 3}}})

    def test_find_profile(self, profiles_file):
        profiles = load_profiles(profiles_file)
        assert find_profile(profiles, "anime/fma").desc == "Fullmetal Alchemist"
        assert find_profile(profiles, "missing") is None


# -------------------------------------
# settings / context
# -------------------------------------

class TestSettings:
    """Tests for the settings section."""

    def test_settings(self, profiles_file):
        settings = get_settings(load_config(profiles_file))
        assert settings == {
            "matcher": "posix",
            "use_filedir_conf": True,
            "home": "/home/me",
            "locked": ("sid",),
        }

    def test_empty(self):
        assert get_settings({}) == {}

    def test_unknown_setting(self):
        with pytest.raises(ProfileConfigError, match="unknown settings"):
            get_settings({"settings": {"colour": "red"}})

    def test_bad_separator(self):
        with pytest.raises(ProfileConfigError, match="single character"):
            get_settings({"settings": {"separator": "//"}})

    @pytest.mark.parametrize("value,expected", [
        (True, True),
        (False, False),
        ("yes", True),
        ("no", False),
        ("True", True),
        ("false", False),
    ])
    def test_filedir_conf_flag(self, value, expected):
        settings = get_settings({"settings": {"use-filedir-conf": value}})
        assert settings["use_filedir_conf"] is expected

    @pytest.mark.parametrize("value", ["off", "", 1, None, [True]])
    def test_filedir_conf_invalid(self, value):
        with pytest.raises(ProfileConfigError, match="'use-filedir-conf' must be yes/no"):
            get_settings({"settings": {"use-filedir-conf": value}})

    def test_quoted_no_from_yaml(self, make_file):
        path = make_file("settings:\n  use-filedir-conf: \"no\"\n")
        assert load_context(path).use_filedir_conf is False

    def test_locked_not_list(self):
        with pytest.raises(ProfileConfigError, match="'locked' must be a list"):
            get_settings({"settings": {"locked": "sid"}})


class TestLoadContext:
    """Tests for load_context."""

    def test_context(self, profiles_file):
        ctx = load_context(profiles_file)
        assert ctx.matcher == "posix"
        assert ctx.home == "/home/me"
        assert ctx.locked == frozenset({"sid"})
        assert ctx.use_filedir_conf is True
        assert len(ctx.profiles) == 4

    def test_overrides(self, profiles_file):
        ctx = load_context(profiles_file, matcher="builtin", home="/root")
        assert ctx.matcher == "builtin"
        assert ctx.home == "/root"

    def test_home_from_environment(self, make_file, monkeypatch):
        monkeypatch.setenv("HOME", "/env/home")
        ctx = load_context(make_file("profiles: {}"))
        assert ctx.home == "/env/home"

    def test_bad_matcher(self, make_file):
        with pytest.raises(ValueError, match="unknown matcher"):
            load_context(make_file("settings: {matcher: regex}"))
