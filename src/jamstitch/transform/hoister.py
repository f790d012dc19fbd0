"""Hoist top-level let statements into a declarations block."""

import logging
import re
from dataclasses import dataclass, field

from ..contracts import Declaration, LiteralType
from .scanner import line_depths


@dataclass
class HoistResult:
    """Program text with top-level lets rewritten, plus their declarations."""
    body: str
    declarations: list[Declaration] = field(default_factory=list)

    @property
    def declarations_source(self) -> str:
        return "".join(d.to_source() + "\n" for d in self.declarations)


class DeclarationHoister:
    """Splits each top-level `let` into a typed declaration and an assignment."""

    _LET_PATTERN = re.compile(
        r"^(?P<indent>\s*)let\s+(?P<name>[A-Za-z_$][\w$]*)\s*"
        r"(?::\s*(?P<annotation>(?:=>|[^=;])+?))?\s*"
        r"(?:=(?!>)\s*(?P<init>.*?)|;?)\s*$"
    )
    _NUMBER_PATTERN = re.compile(r"^[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
    _STRING_PATTERN = re.compile(r"""^(?:"[^"]*"|'[^']*')$""")

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    def hoist(self, text: str, seen: set[str] | None = None) -> HoistResult:
        """
        Rewrite every top-level let in text.

        Pass the same seen set for every file of one program so that a name
        declared in two files is reported as a duplicate.
        """
        lines = text.split("\n")
        depths = line_depths(text)
        body: list[str] = []
        declarations: list[Declaration] = []
        seen = set() if seen is None else seen

        for line, depth in zip(lines, depths):
            match = self._LET_PATTERN.match(line) if depth == 0 else None
            if not match:
                body.append(line)
                continue

            declaration = self._declaration_from(match)
            if declaration.name in seen:
                self.logger.warning("Duplicate top-level declaration of '%s'", declaration.name)
            seen.add(declaration.name)
            declarations.append(declaration)

            if declaration.initializer is not None:
                body.append(f"{match.group('indent')}{declaration.name} = {declaration.initializer}")

        return HoistResult(body="\n".join(body), declarations=declarations)

    def _declaration_from(self, match: re.Match[str]) -> Declaration:
        annotation = match.group("annotation")
        initializer = match.group("init")
        if annotation:
            return Declaration(
                name=match.group("name"),
                annotation=annotation.strip(),
                initializer=initializer,
            )
        inferred = self.infer_type(initializer)
        if not inferred.is_resolved:
            self.logger.debug("Could not infer a type for '%s', declaring it as any", match.group("name"))
        return Declaration(
            name=match.group("name"),
            inferred=inferred,
            initializer=initializer,
        )

    def infer_type(self, initializer: str | None) -> LiteralType:
        """Best-effort type from the literal shape of an initializer."""
        if initializer is None:
            return LiteralType.UNRESOLVED

        value = initializer.strip().rstrip(";").strip()
        if self._NUMBER_PATTERN.match(value):
            return LiteralType.NUMBER
        if value in ("true", "false"):
            return LiteralType.BOOLEAN
        if self._STRING_PATTERN.match(value):
            return LiteralType.STRING
        if value.startswith("["):
            return LiteralType.ARRAY
        return LiteralType.UNRESOLVED
