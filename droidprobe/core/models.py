"""Data models for discovered screens, elements and exploration runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import networkx as nx


class ElementKind(str, Enum):
    """Category under which an element was discovered.

    Declaration order is the discovery order used by the snapshot builder.
    """

    CLICKABLE = "clickable"
    INPUT = "input"
    TEXT = "text"
    IMAGE = "image"
    LIST = "list"
    CHECKBOX = "checkbox"
    SCROLLABLE = "scrollable"
    CUSTOM = "custom"


class ClickOutcome(str, Enum):
    """Result of one exploration click."""

    NAVIGATED = "navigated"
    SAME_SCREEN = "same_screen"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Bounds:
    """On-screen rectangle in pixel coordinates."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Bounds:
        data = data or {}
        return cls(
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
        )


@dataclass(frozen=True, slots=True)
class ElementDescriptor:
    """One discovered UI node at a point in time."""

    kind: ElementKind
    text: str = ""
    accessibility_label: str = ""
    identifier: str = ""
    class_name: str = ""
    bounds: Bounds = field(default_factory=Bounds)
    enabled: bool = False
    clickable: bool = False
    checked: bool = False
    hint: str = ""
    selectors: tuple[str, ...] = ()

    def structural_key(self) -> tuple[str, str, str]:
        """Equality key used for duplicate suppression."""
        return self.identifier, self.text, self.class_name

    @property
    def display_name(self) -> str:
        """Human-identifying name: text, then label, then identifier."""
        return self.text or self.accessibility_label or self.identifier

    def has_human_label(self) -> bool:
        return bool(self.text or self.accessibility_label)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "text": self.text,
            "accessibilityLabel": self.accessibility_label,
            "identifier": self.identifier,
            "className": self.class_name,
            "bounds": self.bounds.to_dict(),
            "enabled": self.enabled,
            "clickable": self.clickable,
            "checked": self.checked,
            "selectors": list(self.selectors),
        }
        if self.hint:
            data["hint"] = self.hint
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ElementDescriptor:
        return cls(
            kind=ElementKind(data.get("kind", ElementKind.CUSTOM.value)),
            text=data.get("text", ""),
            accessibility_label=data.get("accessibilityLabel", ""),
            identifier=data.get("identifier", ""),
            class_name=data.get("className", ""),
            bounds=Bounds.from_dict(data.get("bounds")),
            enabled=bool(data.get("enabled", False)),
            clickable=bool(data.get("clickable", False)),
            checked=bool(data.get("checked", False)),
            hint=data.get("hint", ""),
            selectors=tuple(data.get("selectors", ())),
        )


@dataclass(frozen=True, slots=True)
class ScreenSnapshot:
    """The full discovery result for one loaded screen."""

    screen_id: str
    captured_at: datetime
    elements_by_kind: dict[ElementKind, tuple[ElementDescriptor, ...]]
    screenshot_ref: Optional[str] = None
    page_source_ref: Optional[str] = None

    def elements(self, kind: ElementKind) -> tuple[ElementDescriptor, ...]:
        return self.elements_by_kind.get(kind, ())

    def element_count(self) -> int:
        return sum(len(items) for items in self.elements_by_kind.values())

    @property
    def screen_name(self) -> str:
        """Last dotted component of the screen id, e.g. ``MainActivity``."""
        return self.screen_id.rsplit("/", 1)[-1].rsplit(".", 1)[-1] or "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "screenId": self.screen_id,
            "capturedAt": self.captured_at.isoformat(),
            "elementsByKind": {
                kind.value: [descriptor.to_dict() for descriptor in self.elements(kind)]
                for kind in ElementKind
            },
            "screenshotRef": self.screenshot_ref,
            "pageSourceRef": self.page_source_ref,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScreenSnapshot:
        raw_elements = data.get("elementsByKind", {})
        elements_by_kind = {
            kind: tuple(ElementDescriptor.from_dict(item) for item in raw_elements.get(kind.value, []))
            for kind in ElementKind
        }
        return cls(
            screen_id=data.get("screenId", "unknown"),
            captured_at=datetime.fromisoformat(data["capturedAt"]) if data.get("capturedAt") else datetime.now(),
            elements_by_kind=elements_by_kind,
            screenshot_ref=data.get("screenshotRef"),
            page_source_ref=data.get("pageSourceRef"),
        )


@dataclass(slots=True)
class ClickEdge:
    """One attempted click from an already-captured screen."""

    from_screen_index: int
    descriptor: ElementDescriptor
    to_screen_index: Optional[int] = None
    outcome: ClickOutcome = ClickOutcome.FAILED
    error: Optional[str] = None
    back_screen_id: Optional[str] = None
    back_anomaly: bool = False

    @property
    def succeeded(self) -> bool:
        return self.to_screen_index is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fromScreenIndex": self.from_screen_index,
            "descriptor": self.descriptor.to_dict(),
            "toScreenIndex": self.to_screen_index,
            "outcome": self.outcome.value,
            "error": self.error,
            "backScreenId": self.back_screen_id,
            "backAnomaly": self.back_anomaly,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClickEdge:
        return cls(
            from_screen_index=int(data["fromScreenIndex"]),
            descriptor=ElementDescriptor.from_dict(data["descriptor"]),
            to_screen_index=data.get("toScreenIndex"),
            outcome=ClickOutcome(data.get("outcome", ClickOutcome.FAILED.value)),
            error=data.get("error"),
            back_screen_id=data.get("backScreenId"),
            back_anomaly=bool(data.get("backAnomaly", False)),
        )


@dataclass(slots=True)
class ExplorationRun:
    """Record of one navigation traversal."""

    visited_screens: list[ScreenSnapshot] = field(default_factory=list)
    click_edges: list[ClickEdge] = field(default_factory=list)
    session_error: Optional[str] = None

    @property
    def start_screen(self) -> Optional[ScreenSnapshot]:
        return self.visited_screens[0] if self.visited_screens else None

    def add_screen(self, snapshot: ScreenSnapshot) -> int:
        """Append a snapshot and return its index."""
        self.visited_screens.append(snapshot)
        return len(self.visited_screens) - 1

    def add_edge(self, edge: ClickEdge) -> None:
        if not 0 <= edge.from_screen_index < len(self.visited_screens):
            raise ValueError(f"Click edge refers to uncaptured screen {edge.from_screen_index}")
        self.click_edges.append(edge)

    def to_graph(self) -> nx.DiGraph:
        """Screen transition graph; nodes are screen indices."""
        graph = nx.DiGraph()
        for index, screen in enumerate(self.visited_screens):
            graph.add_node(index, screen_id=screen.screen_id)
        for edge in self.click_edges:
            if edge.to_screen_index is not None:
                graph.add_edge(
                    edge.from_screen_index,
                    edge.to_screen_index,
                    label=edge.descriptor.display_name,
                    outcome=edge.outcome.value,
                )
        return graph

    def summary(self) -> dict[str, Any]:
        outcomes = {outcome.value: 0 for outcome in ClickOutcome}
        for edge in self.click_edges:
            outcomes[edge.outcome.value] += 1
        return {
            "totalScreens": len(self.visited_screens),
            "distinctScreenIds": len({screen.screen_id for screen in self.visited_screens}),
            "totalClicks": len(self.click_edges),
            "clickOutcomes": outcomes,
            "backAnomalies": sum(1 for edge in self.click_edges if edge.back_anomaly),
            "totalClickableElements": sum(len(s.elements(ElementKind.CLICKABLE)) for s in self.visited_screens),
            "totalInputElements": sum(len(s.elements(ElementKind.INPUT)) for s in self.visited_screens),
            "totalTextElements": sum(len(s.elements(ElementKind.TEXT)) for s in self.visited_screens),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "visitedScreens": [screen.to_dict() for screen in self.visited_screens],
            "clickEdges": [edge.to_dict() for edge in self.click_edges],
            "sessionError": self.session_error,
            "summary": self.summary(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExplorationRun:
        return cls(
            visited_screens=[ScreenSnapshot.from_dict(item) for item in data.get("visitedScreens", [])],
            click_edges=[ClickEdge.from_dict(item) for item in data.get("clickEdges", [])],
            session_error=data.get("sessionError"),
        )
