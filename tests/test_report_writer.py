"""Unit tests for JSON/HTML report output."""

import json
import os
from datetime import datetime

from droidprobe.automation.flow_runner import FlowResults, StepResult
from droidprobe.core.models import ClickEdge, ClickOutcome, ElementDescriptor, ElementKind, ExplorationRun, ScreenSnapshot
from droidprobe.reporting.report_writer import ReportWriter, transition_summary

APP_INFO = {"package": "com.eekifoods.dev", "activity": "com.eekifoods.MainActivity"}


def _run():
    dome = ElementDescriptor(ElementKind.CLICKABLE, text="<Dome>", selectors=('//*[@text="<Dome>"]',))
    elements = {kind: () for kind in ElementKind}
    elements[ElementKind.CLICKABLE] = (dome,)
    run = ExplorationRun()
    run.add_screen(ScreenSnapshot("app/.Main", datetime.now(), elements, screenshot_ref="main.png"))
    run.add_screen(ScreenSnapshot("app/.Dome", datetime.now(), {kind: () for kind in ElementKind}))
    run.add_edge(ClickEdge(0, dome, to_screen_index=1, outcome=ClickOutcome.NAVIGATED))
    return run


def test_transition_summary_lists_reachable_screens():
    summary = transition_summary(_run())
    assert summary["nodes"] == 2
    assert summary["edges"] == 1
    assert summary["reachableFromStart"] == [1]
    assert summary["transitions"] == [{"from": 0, "to": 1, "label": "<Dome>", "outcome": "navigated"}]


def test_transition_summary_of_empty_run():
    assert transition_summary(ExplorationRun())["reachableFromStart"] == []


def test_write_inspection(tmp_path):
    writer = ReportWriter(str(tmp_path / "results"), str(tmp_path / "screenshots"))
    test_cases = [{"name": "Test Click <Dome>", "type": "click_interaction"}]

    path = writer.write_inspection(_run(), test_cases, APP_INFO)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert os.path.basename(path) == "deep_inspection.json"
    assert data["appInfo"] == APP_INFO
    assert data["summary"]["totalScreens"] == 2
    assert data["summary"]["totalTestCases"] == 1
    assert data["clickEdges"][0]["toScreenIndex"] == 1
    assert data["generatedTestCases"] == test_cases

    html = (tmp_path / "results" / "deep_inspection.html").read_text(encoding="utf-8")
    assert "&lt;Dome&gt;" in html
    assert "<Dome>" not in html
    assert "main.png" in html


def test_write_discovery(tmp_path):
    writer = ReportWriter(str(tmp_path))
    path = writer.write_discovery(_run().visited_screens[0], APP_INFO)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["summary"]["clickable"] == 1
    assert data["screen"]["screenId"] == "app/.Main"
    assert (tmp_path / "element_discovery.html").exists()


def test_write_flow_results(tmp_path):
    results = FlowResults("Production Data Collection App - Comprehensive Test")
    results.steps = [
        StepResult("App Launch Verification", status="passed", screenshots=["launch.png"]),
        StepResult("Specimen Button Navigation Test", status="failed", error="element is not displayed"),
    ]

    path = ReportWriter(str(tmp_path)).write_flow_results(results)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert os.path.basename(path) == "test_results.json"
    assert data["summary"] == {"total": 2, "passed": 1, "failed": 1, "successRate": 50.0}
    html = (tmp_path / "comprehensive_test_report.html").read_text(encoding="utf-8")
    assert "element is not displayed" in html
    assert "launch.png" in html
