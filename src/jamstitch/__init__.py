"""Merge independently written MakeCode Arcade games into one project."""

from .assembler import ModuleAssembler
from .composer import ProgramComposer
from .config import StitchConfig
from .contracts import AssembledModule, Bundle, SourceProject, TileRecord
from .errors import PublicationError, RetrievalError, StitchError, UnbalancedScanError
from .runner import StitchResult, StitchRunner

__all__ = [
    "ModuleAssembler",
    "ProgramComposer",
    "StitchConfig",
    "AssembledModule",
    "Bundle",
    "SourceProject",
    "TileRecord",
    "PublicationError",
    "RetrievalError",
    "StitchError",
    "UnbalancedScanError",
    "StitchResult",
    "StitchRunner",
]
