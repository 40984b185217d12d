"""Deny-list / allow-list content filter for brand terms in generated HTML.

Only text nodes are rewritten: tag names, attributes, and the bodies of
``<style>`` and ``<script>`` elements are left untouched. Matching is
case-insensitive on word boundaries, longest phrase first, and any span
covered by an allow-list phrase is never rewritten.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

DEFAULT_DENY_LIST: Dict[str, str] = {
    "learn.microsoft.com": "learning portal",
    "microsoft learn": "learning platform",
    "azure learn": "cloud learning",
    "ms learn": "learning platform",
    "microsoft": "platform",
}

DEFAULT_ALLOW_LIST: Tuple[str, ...] = ("Segoe UI",)

_SEGMENT_RE = re.compile(
    r"(<style\b.*?</style>|<script\b.*?</script>|<!--.*?-->|<[^>]+>)",
    re.IGNORECASE | re.DOTALL,
)


def _phrase_pattern(phrases: Sequence[str]) -> re.Pattern | None:
    if not phrases:
        return None
    ordered = sorted(phrases, key=len, reverse=True)
    return re.compile(
        r"(?<!\w)(?:" + "|".join(re.escape(p) for p in ordered) + r")(?!\w)",
        re.IGNORECASE,
    )


def _match_case(original: str, replacement: str) -> str:
    if original.isupper() and len(original) > 1:
        return replacement.upper()
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


@dataclass
class ContentFilter:
    deny: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DENY_LIST))
    allow: Sequence[str] = DEFAULT_ALLOW_LIST

    def __post_init__(self):
        self._deny_lookup = {k.lower(): v for k, v in self.deny.items()}
        self._deny_re = _phrase_pattern(list(self.deny))
        self._allow_re = _phrase_pattern(list(self.allow))

    def _filter_plain(self, text: str) -> str:
        if self._deny_re is None:
            return text

        def _replace(m: re.Match) -> str:
            return _match_case(m.group(0), self._deny_lookup[m.group(0).lower()])

        if self._allow_re is None:
            return self._deny_re.sub(_replace, text)

        out: List[str] = []
        pos = 0
        for m in self._allow_re.finditer(text):
            out.append(self._deny_re.sub(_replace, text[pos:m.start()]))
            out.append(m.group(0))
            pos = m.end()
        out.append(self._deny_re.sub(_replace, text[pos:]))
        return "".join(out)

    def filter_html(self, html: str) -> str:
        """Rewrite denied phrases in the text nodes of ``html``."""
        parts = _SEGMENT_RE.split(html)
        # split() with one capture group alternates text, markup, text, ...
        return "".join(
            part if i % 2 else self._filter_plain(part)
            for i, part in enumerate(parts)
        )

    def find_violations(self, html: str) -> List[str]:
        """Denied phrases still present in the text nodes of ``html``."""
        if self._deny_re is None:
            return []
        parts = _SEGMENT_RE.split(html)
        text = " ".join(p for i, p in enumerate(parts) if not i % 2)
        if self._allow_re is not None:
            text = self._allow_re.sub(" ", text)
        return sorted({m.group(0).lower() for m in self._deny_re.finditer(text)})
