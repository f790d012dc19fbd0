"""Extract the SpriteKind and StatusBarKind namespace blocks."""

import logging
import re
from dataclasses import dataclass, field


@dataclass
class EnumExtraction:
    """Program text with enum blocks removed, plus their member names."""
    text: str
    sprite_kinds: list[str] = field(default_factory=list)
    status_bar_kinds: list[str] = field(default_factory=list)


class EnumNamespaceExtractor:
    """Collects kind identifiers so they can be declared once for all programs."""

    SPRITE_KIND = "SpriteKind"
    STATUS_BAR_KIND = "StatusBarKind"

    _MEMBER_PATTERN = re.compile(r"export\s+const\s+([^\s=]+)\s*=")

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    def extract(self, text: str) -> EnumExtraction:
        """Strip both enum blocks from text and return their members."""
        text, sprite_kinds = self._strip_block(text, self.SPRITE_KIND)
        text, status_bar_kinds = self._strip_block(text, self.STATUS_BAR_KIND)
        return EnumExtraction(
            text=text,
            sprite_kinds=sprite_kinds,
            status_bar_kinds=status_bar_kinds,
        )

    def _strip_block(self, text: str, namespace: str) -> tuple[str, list[str]]:
        members: list[str] = []
        pattern = re.compile(rf"namespace\s+{namespace}\s*\{{[^}}]*\}}")

        def collect(match: re.Match[str]) -> str:
            for member in self._MEMBER_PATTERN.findall(match.group(0)):
                if member not in members:
                    members.append(member)
            return ""

        text = pattern.sub(collect, text)
        if members:
            self.logger.debug("Found %d %s members", len(members), namespace)
        return text, members


def merge_names(target: list[str], names: list[str] | tuple[str, ...]) -> list[str]:
    """Append names not already in target, keeping first-seen order. Returns the skipped names."""
    skipped: list[str] = []
    for name in names:
        if name in target:
            skipped.append(name)
        else:
            target.append(name)
    return skipped
