"""Group naming and name extraction through an external text generator."""

from .capabilities import (
    NameExtractor,
    NameGenerator,
    NamingCapability,
    apply_group_names,
    extract_participant_names,
    fallback_names,
    generate_group_names,
)
from .gemini import GeminiClient, build_naming
from .stub import OfflineNaming, StaticNaming

__all__ = [
    "GeminiClient",
    "NameExtractor",
    "NameGenerator",
    "NamingCapability",
    "OfflineNaming",
    "StaticNaming",
    "apply_group_names",
    "build_naming",
    "extract_participant_names",
    "fallback_names",
    "generate_group_names",
]
