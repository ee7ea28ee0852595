# ABOUTME: Desktop notifications and browser launching for SSO logins
# ABOUTME: Both are best effort; failures come back as SoftResult instead of raising

"""Desktop notification and browser helpers."""

import platform
import shutil
import subprocess
import webbrowser

from .models import SoftResult

NOTIFY_TIMEOUT_SECONDS = 10


def _applescript_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def notification_command(title: str, message: str, system: str | None = None) -> list[str] | None:
    """Command that shows a desktop notification on this platform, or None if unsupported."""
    system = system or platform.system()
    if system == "Darwin":
        script = f"display notification {_applescript_string(message)} with title {_applescript_string(title)}"
        return ["osascript", "-e", script]
    if system == "Linux":
        return ["notify-send", title, message]
    return None


def send_notification(title: str, message: str) -> SoftResult:
    """Show a desktop notification.

    Args:
        title: Notification title.
        message: Notification body.

    Returns:
        SoftResult; never raises.
    """
    command = notification_command(title, message)
    if command is None:
        return SoftResult.failed(f"Notifications are not supported on {platform.system()}")

    if shutil.which(command[0]) is None:
        return SoftResult.failed(f"{command[0]} not found")

    try:
        result = subprocess.run(command, capture_output=True, timeout=NOTIFY_TIMEOUT_SECONDS, check=False)
    except (OSError, subprocess.SubprocessError) as e:
        return SoftResult.failed(str(e))

    if result.returncode != 0:
        return SoftResult.failed(f"{command[0]} exited with status {result.returncode}")
    return SoftResult.success()


def open_browser(url: str) -> SoftResult:
    """Open a URL in the default browser."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        return SoftResult.failed(str(e))

    if not opened:
        return SoftResult.failed("No browser available")
    return SoftResult.success()
