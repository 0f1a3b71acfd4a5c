"""Line-classification rules and the per-file artifact scanner."""

from .base import DECLARATION, Finding, LineRule, RoutineRule
from .registry import discover_rules
from .rules import AffixRoutineRule, GlobalRoutineRule, ModuleDependencyRule
from .scanner import ArtifactScanner

__all__ = [
    "AffixRoutineRule",
    "ArtifactScanner",
    "DECLARATION",
    "Finding",
    "GlobalRoutineRule",
    "LineRule",
    "ModuleDependencyRule",
    "RoutineRule",
    "discover_rules",
]
