"""Unit tests for settings and the command line."""

import json

import pytest
from appium.webdriver.common.appiumby import AppiumBy

from droidprobe import cli
from droidprobe.core.config import Config
from droidprobe.core.session import locator_strategy


def test_defaults_validate():
    assert Config().validate_config() is True


@pytest.mark.parametrize(
    "overrides",
    [{"max_per_kind": 0}, {"max_clicks_to_try": -1}, {"settle_interval": -0.5}, {"appium_port": 70000}],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValueError):
        Config(**overrides).validate_config()


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("MAX_PER_KIND", "7")
    monkeypatch.setenv("APPIUM_HOST", "10.0.0.2")
    settings = Config()
    assert settings.max_per_kind == 7
    assert settings.appium_server_url() == "http://10.0.0.2:4723/"


def test_capabilities_use_appium_prefix():
    capabilities = Config(app_path="build/app.apk", device_name="Pixel 8").capabilities()
    assert capabilities["platformName"] == "Android"
    assert capabilities["appium:deviceName"] == "Pixel 8"
    assert capabilities["appium:app"].endswith("build/app.apk")
    assert capabilities["appium:automationName"] == "UiAutomator2"


def test_locator_strategy():
    assert locator_strategy('//*[@text="Dome"]') == (AppiumBy.XPATH, '//*[@text="Dome"]')
    assert locator_strategy('android=new UiSelector().text("Dome")') == (
        AppiumBy.ANDROID_UIAUTOMATOR,
        'new UiSelector().text("Dome")',
    )
    assert locator_strategy("~Dome") == (AppiumBy.ACCESSIBILITY_ID, "Dome")


def test_cli_generate_from_inspection_file(tmp_path):
    inspection = {
        "appInfo": {"package": "com.eekifoods.dev"},
        "visitedScreens": [
            {
                "screenId": "com.eekifoods.dev/com.eekifoods.MainActivity",
                "capturedAt": "2024-05-01T12:00:00",
                "elementsByKind": {
                    "clickable": [{"kind": "clickable", "text": "Dome", "selectors": ['//*[@text="Dome"]']}]
                },
            }
        ],
        "clickEdges": [],
    }
    source = tmp_path / "deep_inspection.json"
    source.write_text(json.dumps(inspection))
    output = tmp_path / "suite"

    status = cli.main(["--results-dir", str(tmp_path), "generate", "--input", str(source), "--output", str(output)])

    assert status == 0
    assert "def tap_dome(self):" in (output / "pages" / "dev_page.py").read_text(encoding="utf-8")


def test_cli_generate_without_inspection_data(tmp_path):
    status = cli.main(["--results-dir", str(tmp_path), "generate"])
    assert status == 1


def test_cli_rejects_invalid_settings():
    assert cli.main(["--max-per-kind", "0", "discover"]) == 2


def test_cli_run_flow_with_missing_definition(tmp_path):
    status = cli.main(["--results-dir", str(tmp_path), "run-flow", "--flow", str(tmp_path / "missing.json")])
    assert status == 2


def test_cli_run_flow_with_invalid_definition(tmp_path):
    flow = tmp_path / "flow.json"
    flow.write_text(json.dumps({"name": "Empty", "steps": []}))
    assert cli.main(["--results-dir", str(tmp_path), "run-flow", "--flow", str(flow)]) == 2
