"""JSON and HTML artifact writer for discovery, inspection and flow runs."""

from __future__ import annotations

import os
from datetime import datetime
from html import escape
from typing import Any, Optional

import networkx as nx

from ..automation.flow_runner import FlowResults
from ..core.logger import log
from ..core.models import ClickEdge, ElementKind, ExplorationRun, ScreenSnapshot
from ..utils.file_utils import ensure_directory, save_json, save_text

_STYLE = """
body { font-family: sans-serif; margin: 2em; color: #222; }
table { border-collapse: collapse; margin-bottom: 1.5em; }
th, td { border: 1px solid #ccc; padding: 4px 8px; text-align: left; vertical-align: top; }
th { background: #f0f0f0; }
.passed { color: #1a7f37; } .failed { color: #cf222e; } .anomaly { color: #9a6700; }
img.shot { max-width: 240px; border: 1px solid #ccc; }
code { font-size: 0.85em; }
"""


def transition_summary(run: ExplorationRun) -> dict[str, Any]:
    """Transition graph facts for the report."""
    graph = run.to_graph()
    reachable = nx.descendants(graph, 0) if 0 in graph else set()
    return {
        "nodes": graph.number_of_nodes(),
        "edges": graph.number_of_edges(),
        "reachableFromStart": sorted(reachable),
        "transitions": [
            {"from": source, "to": target, "label": data.get("label", ""), "outcome": data.get("outcome", "")}
            for source, target, data in graph.edges(data=True)
        ],
    }


class ReportWriter:
    """Serializes results under ``results_dir``."""

    def __init__(self, results_dir: str = "test-results", screenshot_dir: str = "screenshots") -> None:
        self.results_dir = ensure_directory(results_dir)
        self.screenshot_dir = screenshot_dir

    # ------------------------------------------------------------------
    # Public writers
    # ------------------------------------------------------------------
    def write_discovery(self, snapshot: ScreenSnapshot, app_info: dict[str, Any]) -> str:
        data = {
            "timestamp": datetime.now().isoformat(),
            "appInfo": app_info,
            "screen": snapshot.to_dict(),
            "summary": {kind.value: len(snapshot.elements(kind)) for kind in ElementKind},
        }
        json_path = os.path.join(self.results_dir, "element_discovery.json")
        save_json(data, json_path)

        body = [self._app_info_table(app_info), self._screen_section(0, snapshot)]
        self._write_html("element_discovery.html", "Element Discovery", body)
        log.info(f"Discovery results written to {json_path}")
        return json_path

    def write_inspection(
        self, run: ExplorationRun, test_cases: list[dict[str, Any]], app_info: dict[str, Any]
    ) -> str:
        transitions = transition_summary(run)
        data = {
            "timestamp": datetime.now().isoformat(),
            "appInfo": app_info,
            **run.to_dict(),
            "transitionGraph": transitions,
            "generatedTestCases": test_cases,
        }
        data["summary"]["totalTestCases"] = len(test_cases)
        json_path = os.path.join(self.results_dir, "deep_inspection.json")
        save_json(data, json_path)

        body = [self._app_info_table(app_info)]
        if run.session_error:
            body.append(f'<p class="failed">Run ended early: {escape(run.session_error)}</p>')
        body.append(self._summary_table(data["summary"]))
        body.append(self._edges_table(run.click_edges))
        body.extend(self._screen_section(index, screen) for index, screen in enumerate(run.visited_screens))
        body.append(f"<h2>Generated test cases ({len(test_cases)})</h2>")
        body.append("<ul>" + "".join(f"<li>{escape(case['name'])}</li>" for case in test_cases) + "</ul>")
        self._write_html("deep_inspection.html", "Deep Inspection", body)
        log.info(f"Inspection results written to {json_path}")
        return json_path

    def write_flow_results(self, results: FlowResults) -> str:
        data = results.to_dict()
        json_path = os.path.join(self.results_dir, "test_results.json")
        save_json(data, json_path)

        rows = []
        for step in results.steps:
            shots = "".join(self._image(ref) for ref in step.screenshots)
            rows.append(
                f'<tr><td>{escape(step.name)}</td><td class="{escape(step.status)}">{escape(step.status.upper())}</td>'
                f"<td>{round(step.duration_ms)} ms</td><td>{escape(step.error or '')}</td><td>{shots}</td></tr>"
            )
        body = [
            self._summary_table(data["summary"]),
            "<table><tr><th>Test</th><th>Status</th><th>Duration</th><th>Error</th><th>Screenshots</th></tr>"
            + "".join(rows) + "</table>",
        ]
        if results.session_error:
            body.insert(0, f'<p class="failed">Session lost: {escape(results.session_error)}</p>')
        self._write_html("comprehensive_test_report.html", results.suite_name, body)
        log.info(f"Flow results written to {json_path}")
        return json_path

    # ------------------------------------------------------------------
    # HTML fragments
    # ------------------------------------------------------------------
    def _write_html(self, filename: str, title: str, body: list[str]) -> Optional[str]:
        document = (
            "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
            f"<title>{escape(title)}</title><style>{_STYLE}</style></head><body>"
            f"<h1>{escape(title)}</h1><p>Generated {escape(datetime.now().isoformat(timespec='seconds'))}</p>"
            + "\n".join(body)
            + "</body></html>\n"
        )
        path = os.path.join(self.results_dir, filename)
        return path if save_text(document, path) else None

    def _image(self, ref: Optional[str]) -> str:
        if not ref:
            return "<em>no screenshot</em>"
        src = os.path.relpath(os.path.join(self.screenshot_dir, ref), self.results_dir)
        return f'<img class="shot" src="{escape(src)}" alt="{escape(ref)}">'

    @staticmethod
    def _app_info_table(app_info: dict[str, Any]) -> str:
        rows = "".join(f"<tr><th>{escape(str(k))}</th><td>{escape(str(v))}</td></tr>" for k, v in app_info.items())
        return f"<h2>Application</h2><table>{rows}</table>"

    @staticmethod
    def _summary_table(summary: dict[str, Any]) -> str:
        rows = "".join(f"<tr><th>{escape(str(k))}</th><td>{escape(str(v))}</td></tr>" for k, v in summary.items())
        return f"<h2>Summary</h2><table>{rows}</table>"

    @staticmethod
    def _edges_table(edges: list[ClickEdge]) -> str:
        rows = []
        for edge in edges:
            css = "anomaly" if edge.back_anomaly else ("passed" if edge.succeeded else "failed")
            rows.append(
                f"<tr><td>{edge.from_screen_index}</td><td>{escape(edge.descriptor.display_name)}</td>"
                f"<td>{'' if edge.to_screen_index is None else edge.to_screen_index}</td>"
                f'<td class="{css}">{escape(edge.outcome.value)}{" (back anomaly)" if edge.back_anomaly else ""}</td>'
                f"<td>{escape(edge.error or '')}</td></tr>"
            )
        return (
            "<h2>Clicks</h2><table><tr><th>From</th><th>Element</th><th>To</th><th>Outcome</th><th>Error</th></tr>"
            + "".join(rows) + "</table>"
        )

    def _screen_section(self, index: int, snapshot: ScreenSnapshot) -> str:
        parts = [
            f"<h2>Screen {index}: {escape(snapshot.screen_id)}</h2>",
            f"<p>Captured {escape(snapshot.captured_at.isoformat(timespec='seconds'))}</p>",
            self._image(snapshot.screenshot_ref),
        ]
        for kind in ElementKind:
            descriptors = snapshot.elements(kind)
            if not descriptors:
                continue
            rows = "".join(
                f"<tr><td>{escape(d.text)}</td><td>{escape(d.accessibility_label)}</td><td>{escape(d.identifier)}</td>"
                f"<td>{escape(d.class_name)}</td><td><code>{escape(d.selectors[0]) if d.selectors else ''}</code></td></tr>"
                for d in descriptors
            )
            parts.append(
                f"<h3>{escape(kind.value)} ({len(descriptors)})</h3><table><tr><th>Text</th><th>Label</th>"
                f"<th>Identifier</th><th>Class</th><th>Primary selector</th></tr>{rows}</table>"
            )
        return "\n".join(parts)
