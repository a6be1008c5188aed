"""Parsing of version, constraint and requirement text.

Supported constraint syntax, combinable with ``,``/whitespace (all must hold)
and ``||`` (any may hold):

- ``*``, ``x`` or empty: any version
- ``1.2.3`` / ``=1.2.3`` / ``==1.2.3``: exactly that version
- ``1``, ``1.2``, ``1.x``, ``1.2.*``: wildcard over the missing segments
- ``!=``, ``>``, ``>=``, ``<``, ``<=``: comparisons
- ``^1.2.3``: npm caret, up to the next breaking release
- ``~1.2.3``: npm tilde, up to the next minor release
- ``~>1.2`` / ``~=1.2``: pessimistic operator, bumps the second-to-last segment
- ``1.2.3 - 2.0.0``: inclusive hyphen range
"""

import re
from typing import List, Optional, Tuple, Union

from semantic_version import Version

from errors import VersionParseError
from .models import Package, Requirement
from .range import Range

_TOKEN_RE = re.compile(
    r"\s*(?P<op>~>|~=|==|!=|>=|<=|\^|~|=|>|<)?\s*(?P<version>[^\s,|<>=!~^]+)\s*,?"
)
_HYPHEN_RE = re.compile(r"^\s*([0-9A-Za-z\.\-\+]+)\s+-\s+([0-9A-Za-z\.\-\+]+)\s*$")
_RELEASE_RE = re.compile(r"^[vV]?(\d+)(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?(.*)$")
_WILDCARDS = ("x", "X", "*")


def parse_version(text: Union[str, Version]) -> Version:
    """Parse a version string into a semantic_version.Version.

    Strips a leading 'v', coerces loose versions such as ``1.0`` to ``1.0.0``
    and drops build metadata so that ordering and equality agree.

    Raises:
        VersionParseError: If the text is not a version.
    """
    if isinstance(text, Version):
        version = text
    else:
        cleaned = str(text).strip()
        if cleaned[:1] in ("v", "V"):
            cleaned = cleaned[1:]
        if not cleaned:
            raise VersionParseError(f"Invalid version: {text!r}")
        try:
            version = Version(cleaned)
        except ValueError:
            try:
                version = Version.coerce(cleaned)
            except ValueError as exc:
                raise VersionParseError(f"Invalid version: {text!r}") from exc
    if version.build:
        version = version.truncate("prerelease")
    return version


def _release_segments(text: str) -> Tuple[List[int], bool, str]:
    """Split ``1.2.x-rc.1`` into ([1, 2], True, '-rc.1').

    Returns the numeric release segments up to the first wildcard, whether a
    wildcard was present, and the remaining suffix.
    """
    m = _RELEASE_RE.match(text)
    if not m:
        raise VersionParseError(f"Invalid version: {text!r}")
    segments: List[int] = []
    wildcard = False
    for group in m.groups()[:3]:
        if group is None:
            break
        if group in _WILDCARDS:
            wildcard = True
        elif wildcard:
            raise VersionParseError(f"Invalid wildcard version: {text!r}")
        else:
            segments.append(int(group))
    return segments, wildcard, m.group(4)


def _bump(segments: List[int], index: int) -> Version:
    parts = [s or 0 for s in segments] + [0] * (3 - len(segments))
    parts[index] += 1
    for i in range(index + 1, 3):
        parts[i] = 0
    return Version(major=parts[0], minor=parts[1], patch=parts[2])


def _floor(segments: List[int]) -> Version:
    return Version(
        major=segments[0],
        minor=segments[1] if len(segments) > 1 else 0,
        patch=0,
    )


def _wildcard_range(segments: List[int]) -> Range:
    if not segments:
        return Range.any()
    return Range.between(_floor(segments), _bump(segments, len(segments) - 1))


def _parse_constraint(op: Optional[str], text: str) -> Range:
    if text in _WILDCARDS:
        if op in (None, "=", "=="):
            return Range.any()
        if op == "!=":
            return Range.empty()
        raise VersionParseError(f"Operator {op!r} cannot take a wildcard")

    segments, wildcard, rest = _release_segments(text)
    if wildcard and rest:
        raise VersionParseError(f"Invalid wildcard version: {text!r}")
    # A bare partial version ("1", "1.2") behaves like its wildcard form.
    widen = wildcard or (op is None and len(segments) < 3 and not rest)

    if op in (None, "=", "==") and widen:
        return _wildcard_range(segments)
    if op == "!=" and widen:
        return _wildcard_range(segments).complement()

    if wildcard and op in ("<", "<=", ">", ">="):
        # Comparisons are against the whole wildcard span, e.g. "<=1.x" is "<2.0.0".
        lower, upper = _floor(segments), _bump(segments, len(segments) - 1)
        if op == "<":
            return Range.less_than(lower)
        if op == "<=":
            return Range.less_than(upper)
        if op == ">":
            return Range.at_least(upper)
        return Range.at_least(lower)

    if wildcard:
        version = _floor(segments)
    else:
        version = parse_version(text)
    if op in (None, "=", "=="):
        return Range.exactly(version)
    if op == "!=":
        return Range.exactly(version).complement()
    if op == ">":
        return Range.greater_than(version)
    if op == ">=":
        return Range.at_least(version)
    if op == "<":
        return Range.less_than(version)
    if op == "<=":
        return Range.at_most(version)
    if op == "^":
        given = segments or [0]
        index = next((i for i, s in enumerate(given) if s), len(given) - 1)
        return Range.between(version, _bump(given, index))
    if op == "~":
        index = 1 if len(segments) >= 2 else 0
        return Range.between(version, _bump(segments, index))
    if op in ("~>", "~="):
        index = max(0, len(segments) - 2)
        return Range.between(version, _bump(segments, index))
    raise VersionParseError(f"Unsupported operator: {op!r}")


def _parse_alternative(text: str) -> Range:
    """Parse one ``||`` branch: every constraint must hold."""
    s = text.strip()
    if not s:
        return Range.any()

    m = _HYPHEN_RE.match(s)
    if m:
        return Range.between(parse_version(m.group(1)), parse_version(m.group(2)), True, True)

    result = Range.any()
    pos = 0
    while pos < len(s):
        m = _TOKEN_RE.match(s, pos)
        if not m or m.end() == pos:
            raise VersionParseError(f"Invalid constraint: {text!r}")
        result = result.intersect(_parse_constraint(m.group("op"), m.group("version")))
        pos = m.end()
    return result


def parse_range(text: Union[str, Range, None]) -> Range:
    """Parse constraint text into a Range. ``None`` and ``""`` mean any version."""
    if isinstance(text, Range):
        return text
    if text is None:
        return Range.any()
    result = Range.empty()
    for alternative in str(text).split("||"):
        result = result.union(_parse_alternative(alternative))
    return result


def tokenize_rightmost_colon(s: str) -> Tuple[str, Optional[str]]:
    """Return (identifier, spec or None) using the rightmost-colon rule."""
    s = s.strip()
    if ':' not in s:
        return s, None
    parts = s.rsplit(':', 1)
    identifier = parts[0].strip()
    spec_part = parts[1].strip() if len(parts) > 1 else ''
    spec = spec_part if spec_part else None
    return identifier, spec


def parse_requirement(token: str) -> Requirement:
    """Parse a ``name:constraint`` token (``name`` alone means any version)."""
    identifier, spec = tokenize_rightmost_colon(token)
    if not identifier:
        raise VersionParseError(f"Missing package name in {token!r}")
    return Requirement(Package(identifier), parse_range(spec))


def coerce_requirement(item) -> Requirement:
    """Accept a Requirement, a ``name:constraint`` token or a ``(name, constraint)`` pair.

    The name may already be a Package and the constraint may already be a Range.
    """
    if isinstance(item, Requirement):
        return item
    if isinstance(item, str):
        return parse_requirement(item)
    try:
        name, constraint = item
    except (TypeError, ValueError) as exc:
        raise VersionParseError(f"Cannot interpret requirement {item!r}") from exc
    package = name if isinstance(name, Package) else Package(str(name))
    return Requirement(package, parse_range(constraint))
