# -------------------------------------
# treeprofiles
# -------------------------------------
"""
Brace expansion, glob matching and directory-tree profiles.

- Brace expansion: expand_braces("{a,b}{1..3}")  (braces)
- Glob matching:   match_glob("*.mkv", "ep01.mkv")  (globs)
- Profile trees:   load_context(path), resolve(ctx, path)  (loader, lineage)

Imports are lazy to avoid RuntimeWarning when running submodules as scripts.
Use: from treeprofiles import expand_braces, match_glob, etc.
"""

__all__ = [
    # scanner
    "split",
    # sequences
    "generate",
    # braces
    "parse",
    "iter_braces",
    "expand_braces",
    # globs
    "tokenize",
    "translate",
    "compile_glob",
    "match_glob",
    "posix_match",
    "get_matcher",
    # loader
    "Profile",
    "ProfileConfigError",
    "load_config",
    "load_profiles",
    "load_context",
    "clear_cache",
    # lineage
    "ProfileContext",
    "Resolution",
    "find_lineage",
    "apply_profiles",
    "resolve",
]

# Lazy import mapping: attribute -> (module, name)
_LAZY_IMPORTS = {
    # scanner
    "split": (".scanner", "split"),
    # sequences
    "generate": (".sequences", "generate"),
    # braces
    "parse": (".braces", "parse"),
    "iter_braces": (".braces", "iter_braces"),
    "expand_braces": (".braces", "expand_braces"),
    # globs
    "tokenize": (".globs", "tokenize"),
    "translate": (".globs", "translate"),
    "compile_glob": (".globs", "compile_glob"),
    "match_glob": (".globs", "match_glob"),
    "posix_match": (".globs", "posix_match"),
    "get_matcher": (".globs", "get_matcher"),
    # loader
    "Profile": (".loader", "Profile"),
    "ProfileConfigError": (".loader", "ProfileConfigError"),
    "load_config": (".loader", "load_config"),
    "load_profiles": (".loader", "load_profiles"),
    "load_context": (".loader", "load_context"),
    "clear_cache": (".loader", "clear_cache"),
    # lineage
    "ProfileContext": (".lineage", "ProfileContext"),
    "Resolution": (".lineage", "Resolution"),
    "find_lineage": (".lineage", "find_lineage"),
    "apply_profiles": (".lineage", "apply_profiles"),
    "resolve": (".lineage", "resolve"),
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        module_name, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module
        module = import_module(module_name, __package__)
        return getattr(module, attr_name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
