"""Core components of droidprobe: session, discovery and exploration."""

from .config import Config, config
from .element_filter import append_unique, is_duplicate
from .explorer import ShallowExplorer, discover_screen, inspect_app, select_click_candidates
from .extractor import extract_descriptor
from .logger import Logger, log
from .models import (
    Bounds,
    ClickEdge,
    ClickOutcome,
    ElementDescriptor,
    ElementKind,
    ExplorationRun,
    ScreenSnapshot,
)
from .selectors import label_selectors, synthesize_selectors, try_locate
from .session import AppiumNode, AppiumSession, SessionError, open_session
from .snapshot import KIND_QUERIES, ScreenSnapshotBuilder

__all__ = [
    "AppiumNode",
    "AppiumSession",
    "Bounds",
    "ClickEdge",
    "ClickOutcome",
    "Config",
    "ElementDescriptor",
    "ElementKind",
    "ExplorationRun",
    "KIND_QUERIES",
    "Logger",
    "ScreenSnapshot",
    "ScreenSnapshotBuilder",
    "SessionError",
    "ShallowExplorer",
    "append_unique",
    "config",
    "discover_screen",
    "extract_descriptor",
    "inspect_app",
    "is_duplicate",
    "label_selectors",
    "log",
    "open_session",
    "select_click_candidates",
    "synthesize_selectors",
    "try_locate",
]
