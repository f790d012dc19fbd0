"""Per-program text transformations."""

from .hoister import DeclarationHoister, HoistResult
from .lowerer import FunctionLowerer, LoweringResult
from .enums import EnumNamespaceExtractor, EnumExtraction, merge_names
from .tiles import TileResourceRenamer, TileRenaming, rewrite_tile_references

__all__ = [
    "DeclarationHoister",
    "HoistResult",
    "FunctionLowerer",
    "LoweringResult",
    "EnumNamespaceExtractor",
    "EnumExtraction",
    "merge_names",
    "TileResourceRenamer",
    "TileRenaming",
    "rewrite_tile_references",
]
