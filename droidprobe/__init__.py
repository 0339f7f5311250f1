"""droidprobe - UI discovery, shallow exploration and flow runs for Android apps over Appium."""

__version__ = "0.1.0"
