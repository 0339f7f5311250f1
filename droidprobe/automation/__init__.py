"""Scripted interaction flows and test suite generation.

This sub-package provides:
- The fixed production-data flow runner with per-step results
- Test case planning from exploration runs
- Page object and pytest suite generation
"""

from .flow_runner import (
    PRODUCTION_DATA_FLOW,
    Flow,
    FlowAction,
    FlowResults,
    FlowRunner,
    FlowStep,
    FlowStepError,
    StepResult,
    load_flow,
    run_flow,
)
from .suite_generator import SuiteGenerator, build_test_cases

__all__ = [
    "PRODUCTION_DATA_FLOW",
    "Flow",
    "FlowAction",
    "FlowResults",
    "FlowRunner",
    "FlowStep",
    "FlowStepError",
    "StepResult",
    "SuiteGenerator",
    "build_test_cases",
    "load_flow",
    "run_flow",
]
