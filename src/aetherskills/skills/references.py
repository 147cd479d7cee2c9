"""
Cross-references between skills.

Skill documents point at each other in prose ("use after spec-parser",
"output feeds into bdd-scenario-writer") and occasionally with relative
links (``../spec-parser/SKILL.md``). This module recovers those edges
so a catalog can be checked for orphans and broken links. The graph is
informational; nothing enforces it.
"""

from __future__ import annotations

import collections as _collections
import re as _re
import typing as _typing

import aetherskills.skills.skill as skill_module

# Relative link to a sibling skill: ../name/SKILL.md (optionally ./ prefixed)
_LINK_RE = _re.compile(r"(?:\./)?\.\./([a-z0-9][a-z0-9-]*)/SKILL\.md")


def extract_links(body: str) -> list[str]:
    """
    Return the skill names targeted by relative SKILL.md links.

    Names are returned once each, in order of first appearance.
    """
    seen: dict[str, None] = {}
    for match in _LINK_RE.finditer(body):
        seen.setdefault(match.group(1), None)
    return list(seen)


def _mention_pattern(name: str) -> _re.Pattern[str]:
    # A name counts only as a whole hyphenated token, so "tdd" does not
    # match inside "tdd-workflow" and "spec" does not match "spec-parser".
    return _re.compile(rf"(?<![\w-]){_re.escape(name)}(?![\w-])")


def extract_mentions(body: str, names: _typing.Iterable[str]) -> list[str]:
    """
    Return which of the given skill names appear in body.

    Args:
        body: Markdown text to scan.
        names: Candidate skill names.

    Returns:
        Matching names, sorted.
    """
    candidates = set(names)
    found = {name for name in candidates if _mention_pattern(name).search(body)}
    found.update(n for n in extract_links(body) if n in candidates)
    return sorted(found)


class ReferenceGraph:
    """Directed graph of skill-to-skill references."""

    def __init__(self) -> None:
        self._outgoing: dict[str, set[str]] = {}
        self._incoming: dict[str, set[str]] = _collections.defaultdict(set)
        self._links: dict[str, list[str]] = {}

    @classmethod
    def build(cls, skills: _typing.Iterable[skill_module.Skill]) -> ReferenceGraph:
        """Build the graph from a collection of skills."""
        skill_list = list(skills)
        names = [s.name for s in skill_list]
        graph = cls()

        for skill in skill_list:
            others = [n for n in names if n != skill.name]
            targets = set(extract_mentions(skill.body, others))
            graph._outgoing[skill.name] = targets
            graph._links[skill.name] = extract_links(skill.body)
            for target in targets:
                graph._incoming[target].add(skill.name)

        return graph

    @property
    def nodes(self) -> list[str]:
        return sorted(self._outgoing)

    def references(self, name: str) -> list[str]:
        """Skills that name refers to."""
        return sorted(self._outgoing.get(name, ()))

    def referenced_by(self, name: str) -> list[str]:
        """Skills that refer to name."""
        return sorted(self._incoming.get(name, ()))

    def edges(self) -> list[tuple[str, str]]:
        """All (source, target) edges, sorted."""
        return sorted(
            (source, target)
            for source, targets in self._outgoing.items()
            for target in targets
        )

    def orphans(self) -> list[str]:
        """Skills with neither inbound nor outbound references."""
        return [
            name for name in self.nodes
            if not self._outgoing[name] and not self._incoming.get(name)
        ]

    def broken_links(self) -> dict[str, list[str]]:
        """Relative SKILL.md links whose target is not in the graph."""
        broken: dict[str, list[str]] = {}
        for name in self.nodes:
            missing = [t for t in self._links.get(name, []) if t not in self._outgoing]
            if missing:
                broken[name] = missing
        return broken

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "skills": {
                name: {
                    "references": self.references(name),
                    "referenced_by": self.referenced_by(name),
                }
                for name in self.nodes
            },
            "edge_count": len(self.edges()),
            "orphans": self.orphans(),
            "broken_links": self.broken_links(),
        }
