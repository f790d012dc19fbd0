"""Lower top-level function statements into assigned arrow functions."""

import logging
import re
from dataclasses import dataclass, field

from ..contracts import LoweredFunction
from .scanner import depth_at, find_block_end


@dataclass
class LoweringResult:
    """Remaining program text plus the functions lifted out of it."""
    body: str
    functions: list[LoweredFunction] = field(default_factory=list)

    @property
    def functions_source(self) -> str:
        return "".join(f.to_source() + "\n" for f in self.functions)


class FunctionLowerer:
    """
    Rewrites `function name(params) { ... }` as `const name = (params) => { ... }`.

    Functions are lifted in discovery order so that every closure is defined
    before the remaining top-level statements that may call it. Only
    statements at brace depth zero are lowered; nested functions travel with
    their enclosing body.
    """

    _SIGNATURE_PATTERN = re.compile(
        r"^[ \t]*function\s+(?P<name>[^\s()]+)\s*(?P<params>\([^)]*\))\s*(?::[^{]*)?\{",
        re.MULTILINE,
    )

    def __init__(self, max_scan_steps: int | None = None) -> None:
        self.max_scan_steps = max_scan_steps
        self.logger = logging.getLogger(self.__class__.__name__)

    def lower(self, text: str) -> LoweringResult:
        """
        Lift every top-level function statement out of text.

        Raises:
            UnbalancedScanError: a function body never closes.
        """
        functions: list[LoweredFunction] = []
        body = text

        while (match := self._next_top_level(body)) is not None:
            name = match.group("name")
            body_start, end = find_block_end(
                body, match.end() - 1, name=name, max_steps=self.max_scan_steps
            )
            functions.append(LoweredFunction(
                name=name,
                params=match.group("params"),
                body=body[body_start:end],
            ))
            self.logger.debug("Lowered function '%s'", name)
            body = body[:match.start()] + body[end:]

        return LoweringResult(body=body, functions=functions)

    def _next_top_level(self, text: str) -> re.Match[str] | None:
        """First signature match that sits in code at brace depth zero."""
        for match in self._SIGNATURE_PATTERN.finditer(text):
            keyword = match.start() + len(match.group(0)) - len(match.group(0).lstrip(" \t"))
            depth, in_code = depth_at(text, keyword)
            if depth == 0 and in_code:
                return match
        return None
