import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from filesearch.core.constants import GITIGNORE_FILE_NAME

_MAX_BRACE_EXPANSION = 1000


@dataclass
class _GitignoreRule:
    pattern: str
    negated: bool
    anchored: bool
    dir_only: bool
    regex: re.Pattern


def load_gitignore(directory: Path) -> List[str]:
    """Rule lines of the directory's own .gitignore, read fresh on every call."""
    gitignore = directory / GITIGNORE_FILE_NAME
    if not gitignore.is_file():
        return []
    try:
        return gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return []


def expand_braces(pattern: str) -> List[str]:
    """
    Expands brace patterns in a glob string.
    For example, "**/*.{js,ts}" becomes ["**/*.js", "**/*.ts"].
    """
    patterns = [pattern]
    while any("{" in p for p in patterns):
        new_patterns = []
        for p in patterns:
            match = re.search(r"\{([^{}]*)\}", p)
            if match:
                prefix = p[:match.start()]
                suffix = p[match.end():]
                for option in match.group(1).split(","):
                    new_patterns.append(f"{prefix}{option}{suffix}")
            else:
                new_patterns.append(p)
        if len(new_patterns) > _MAX_BRACE_EXPANSION or new_patterns == patterns:
            return patterns
        patterns = new_patterns
    return patterns


def translate_glob(pattern: str) -> str:
    """Glob to regex where '*' and '?' stay inside one path segment and '**' crosses them."""
    out: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1:end].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end + 1
                continue
        elif c == "\\" and i + 1 < n:
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def _compile(pattern: str) -> re.Pattern:
    parts = [translate_glob(p) for p in expand_braces(pattern)]
    return re.compile(r"(?s:%s)\Z" % "|".join(f"(?:{p})" for p in parts))


def _parse_lines(lines: Iterable[str]) -> List[_GitignoreRule]:
    rules: List[_GitignoreRule] = []
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if line.startswith(r"\#"):
            line = line[1:]
        elif line.startswith("#"):
            continue
        negated = line.startswith("!")
        if negated:
            line = line[1:].strip()
        dir_only = line.endswith("/")
        if dir_only:
            line = line.rstrip("/")
        anchored = line.startswith("/") or "/" in line
        line = line.lstrip("/")
        if not line:
            continue
        rules.append(
            _GitignoreRule(
                pattern=line,
                negated=negated,
                anchored=anchored,
                dir_only=dir_only,
                regex=_compile(line),
            )
        )
    return rules


class GitignoreMatcher:
    """
    Ignore rules of one .gitignore file.

    `base` is the POSIX path of the file's directory relative to the walk root
    ("" for the root itself); rules only apply below it.
    """

    def __init__(self, lines: List[str], base: str = ""):
        self.base = base.strip("/")
        self._rules = _parse_lines(lines or [])
        self._cache: dict[tuple[str, bool], Optional[bool]] = {}
        self._cache_order: list[tuple[str, bool]] = []
        self._cache_max = 4096

    def __bool__(self) -> bool:
        return bool(self._rules)

    def _relative(self, rel_posix: str) -> Optional[str]:
        if not self.base:
            return rel_posix
        prefix = self.base + "/"
        if rel_posix.startswith(prefix):
            return rel_posix[len(prefix):]
        return None

    def _match_rule(self, rule: _GitignoreRule, rel_posix: str, is_dir: bool) -> bool:
        if rule.dir_only and not is_dir:
            return False
        if rule.anchored:
            return rule.regex.match(rel_posix) is not None
        name = rel_posix.rsplit("/", 1)[-1]
        return rule.regex.match(name) is not None

    def match(self, rel_posix: str, is_dir: bool = False) -> Optional[bool]:
        """True when ignored, False when re-included by a negated rule, None when no rule applies."""
        key = (str(rel_posix), bool(is_dir))
        if key in self._cache:
            return self._cache[key]
        result: Optional[bool] = None
        local = self._relative(rel_posix)
        if local:
            for rule in self._rules:
                if self._match_rule(rule, local, is_dir):
                    result = not rule.negated
        self._cache[key] = result
        self._cache_order.append(key)
        if len(self._cache_order) > self._cache_max:
            stale = self._cache_order.pop(0)
            self._cache.pop(stale, None)
        return result

    def is_ignored(self, rel_posix: str, is_dir: bool = False) -> bool:
        return bool(self.match(rel_posix, is_dir))


class GlobFilter:
    """
    Include/exclude globs of one root, in gitignore syntax.

    Exclude globs prune files and directories. Include globs, when present,
    whitelist files only; directories are always descended.
    """

    def __init__(self, include_patterns: Optional[List[str]] = None, exclude_patterns: Optional[List[str]] = None):
        self._include = GitignoreMatcher([p for p in include_patterns or [] if p])
        self._exclude = GitignoreMatcher([p for p in exclude_patterns or [] if p])

    def is_excluded(self, rel_posix: str, is_dir: bool = False) -> bool:
        if self._exclude.is_ignored(rel_posix, is_dir):
            return True
        if is_dir or not self._include:
            return False
        return not self._include.is_ignored(rel_posix, is_dir)
