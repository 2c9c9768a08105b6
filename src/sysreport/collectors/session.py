"""
User session collector.

Reports locale, timezone, desktop session and screen information.
"""

from __future__ import annotations

import os
import re
from datetime import datetime
from typing import Any

from sysreport.collectors.base import BaseCollector

RESOLUTION_RE = re.compile(r"^\s+(\d+x\d+)\s+([\d.]+)\*")

AUTOLOGIN_FILES = {
    "/etc/gdm3/custom.conf": "AutomaticLoginEnable",
    "/etc/gdm/custom.conf": "AutomaticLoginEnable",
}


class SessionCollector(BaseCollector):
    """Collects information about the user session."""

    name = "session"
    description = "Language, timezone, desktop session and screens"

    def collect(self) -> dict[str, Any]:
        """Collect session information."""
        data: dict[str, Any] = {}

        language = self._get_language()
        if language:
            data["Language"] = language

        timezone = self._get_timezone()
        if timezone:
            data["Timezone"] = timezone

        session = self._get_session()
        if session:
            data["Session"] = session

        data["Autologin"] = self._get_autologin()

        screens = self._get_screens()
        if screens:
            data["Screens"] = screens

        return data

    def _get_language(self) -> str:
        """Get the first configured UI language."""
        for var in ("LANGUAGE", "LC_ALL", "LANG"):
            value = os.environ.get(var, "")
            if value:
                return value.split(":")[0].split(".")[0]
        return ""

    def _get_timezone(self) -> str:
        """Get the timezone name."""
        try:
            link = os.readlink("/etc/localtime")
            if "zoneinfo/" in link:
                return link.split("zoneinfo/")[-1]
        except OSError:
            pass

        tz_name = self.read_value("/etc/timezone")
        if tz_name:
            return tz_name
        return datetime.now().astimezone().tzname() or ""

    def _get_session(self) -> dict[str, str]:
        """Get desktop environment and session type."""
        session = {}
        for key, var in (
            ("DE", "XDG_CURRENT_DESKTOP"),
            ("Name", "XDG_SESSION_DESKTOP"),
            ("Type", "XDG_SESSION_TYPE"),
        ):
            value = os.environ.get(var, "")
            if value:
                session[key] = value
        return session

    def _get_autologin(self) -> bool:
        """Check whether the display manager logs a user in automatically."""
        for path, key in AUTOLOGIN_FILES.items():
            values = self.read_settings(path)
            if values.get(key, "").lower() == "true":
                return True
        return False

    def _get_screens(self) -> list[dict[str, str]]:
        """Get active screen resolutions from xrandr."""
        if not os.environ.get("DISPLAY"):
            return []

        output = self.probe("xrandr")
        if not output:
            return []

        screens = []
        for line in output.splitlines():
            match = RESOLUTION_RE.match(line)
            if match:
                screens.append({"Resolution": match.group(1), "Frequency": match.group(2)})
        return screens
