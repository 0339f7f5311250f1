"""Configuration management for the droidprobe toolkit."""

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Config(BaseSettings):
    """Configuration class for droidprobe discovery and flow runs."""

    # Appium server
    appium_host: str = Field(default="localhost")
    appium_port: int = Field(default=4723)
    appium_base_path: str = Field(default="/")

    # Session capabilities
    platform_name: str = Field(default="Android")
    device_name: str = Field(default="Android Emulator")
    platform_version: str = Field(default="15")
    app_path: str = Field(default="app-dev-release.apk", description="APK installed for the session")
    automation_name: str = Field(default="UiAutomator2")
    new_command_timeout: int = Field(default=240)
    no_reset: bool = Field(default=False)
    full_reset: bool = Field(default=False)
    connect_hardware_keyboard: bool = Field(default=True)
    expected_app_package: Optional[str] = Field(default=None, description="Package the launch check expects")

    # Discovery
    launch_wait: float = Field(default=5.0, description="Seconds to wait for the app to load")
    settle_interval: float = Field(default=3.0, description="Seconds to wait after click/back")
    max_per_kind: int = Field(default=20, description="Nodes inspected per element kind")
    max_clicks_to_try: int = Field(default=5)
    capture_page_source: bool = Field(default=True)

    # Output
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")
    screenshot_dir: str = Field(default="screenshots")
    results_dir: str = Field(default="test-results")
    generated_tests_dir: str = Field(default="generated_tests")

    class Config:
        """Pydantic configuration for environment loading."""

        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    def validate_config(self) -> bool:
        """Validate configuration values."""
        if self.max_per_kind <= 0:
            raise ValueError("max_per_kind must be positive")

        if self.max_clicks_to_try < 0:
            raise ValueError("max_clicks_to_try cannot be negative")

        if self.settle_interval < 0 or self.launch_wait < 0:
            raise ValueError("Wait intervals cannot be negative")

        if not 0 < self.appium_port < 65536:
            raise ValueError("Appium port must be between 1 and 65535")

        return True

    def appium_server_url(self) -> str:
        """Return the command executor URL of the Appium server."""
        path = self.appium_base_path if self.appium_base_path.startswith("/") else f"/{self.appium_base_path}"
        return f"http://{self.appium_host}:{self.appium_port}{path}"

    def capabilities(self) -> dict[str, Any]:
        """Return W3C capabilities for a new automation session."""
        return {
            "platformName": self.platform_name,
            "appium:deviceName": self.device_name,
            "appium:platformVersion": self.platform_version,
            "appium:app": os.path.abspath(self.app_path),
            "appium:automationName": self.automation_name,
            "appium:newCommandTimeout": self.new_command_timeout,
            "appium:connectHardwareKeyboard": self.connect_hardware_keyboard,
            "appium:noReset": self.no_reset,
            "appium:fullReset": self.full_reset,
        }


# Global configuration instance
config = Config()
