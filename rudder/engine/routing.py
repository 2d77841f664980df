"""
Route patterns.

Templates use ``:name`` for a segment, ``:name?`` for an optional segment
and ``*`` for a wildcard:

    /photos/:id
    /files/:dir/:name?
    /static/*

A compiled regular expression can be used instead of a template; its
named groups become path params.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple, Union

_TOKEN_RE = re.compile(r"(/?):([A-Za-z_][A-Za-z0-9_]*)(\?)?|\*")

RouteSpec = Union[str, Pattern[str], None]


def join_paths(*parts: Optional[str]) -> str:
    """Join path fragments with single slashes. Empty result is "/"."""
    segments = [p.strip("/") for p in parts if p and p.strip("/")]
    return "/" + "/".join(segments)


def route_param_names(route: RouteSpec) -> Tuple[str, ...]:
    """Names of the path params a route declares."""
    if route is None:
        return ()
    if isinstance(route, re.Pattern):
        return tuple(route.groupindex)
    return tuple(m.group(2) for m in _TOKEN_RE.finditer(route) if m.group(2))


def _template_to_regex(template: str) -> str:
    pattern = []
    position = 0
    wildcard = 0
    for match in _TOKEN_RE.finditer(template):
        pattern.append(re.escape(template[position:match.start()]))
        slash, name, optional = match.groups()
        if name is None:
            pattern.append(f"(?P<_{wildcard}>.*)")
            wildcard += 1
        elif optional:
            pattern.append(f"(?:{re.escape(slash)}(?P<{name}>[^/]+))?")
        else:
            pattern.append(f"{re.escape(slash)}(?P<{name}>[^/]+)")
        position = match.end()
    pattern.append(re.escape(template[position:]))
    return "".join(pattern)


@dataclass(frozen=True)
class RoutePattern:
    """
    A compiled route.

    Attributes:
        source: Human readable route (template or regex source)
        regex: Full-match expression
        param_names: Declared path param names
    """
    source: str
    regex: Pattern[str]
    param_names: Tuple[str, ...]

    @classmethod
    def compile(cls, prefix: str, route: RouteSpec) -> "RoutePattern":
        """
        Compile ``route`` under ``prefix``.

        Regex routes are anchored after the escaped prefix.
        """
        if isinstance(route, re.Pattern):
            base = prefix.rstrip("/")
            source = route.pattern
            if source.startswith("^"):
                source = source[1:]
            if source.endswith("$"):
                source = source[:-1]
            regex = re.compile(re.escape(base) + source, route.flags)
            return cls(source=f"{base}{route.pattern}", regex=regex, param_names=tuple(regex.groupindex))

        template = join_paths(prefix, route or "")
        regex = re.compile(_template_to_regex(template))
        return cls(source=template, regex=regex, param_names=route_param_names(template))

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """Return path params when ``path`` matches, else None."""
        if len(path) > 1 and path.endswith("/"):
            path = path.rstrip("/") or "/"
        m = self.regex.fullmatch(path)
        if m is None:
            return None

        params = {k: v for k, v in m.groupdict().items() if v is not None and not k.startswith("_")}
        named = set(self.regex.groupindex.values())
        for index, value in enumerate(m.groups(), start=1):
            if index not in named and value is not None:
                params[str(len(params))] = value
        wildcards = [v for k, v in m.groupdict().items() if k.startswith("_") and v is not None]
        for position, value in enumerate(wildcards):
            params[str(position)] = value
        return params

    def __str__(self) -> str:
        return self.source
