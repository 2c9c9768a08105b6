"""
Hardware information collector.

Reports manufacturer, firmware, CPU, GPU, memory and disk sizes.
"""

from __future__ import annotations

from typing import Any

import psutil

from sysreport.collectors.base import BaseCollector

DMI_DIR = "/sys/class/dmi/id"
GIB = 1024**3


class HardwareCollector(BaseCollector):
    """Collects hardware information."""

    name = "hardware"
    description = "Manufacturer, firmware, CPU, GPU, memory and disks"

    def collect(self) -> dict[str, Any]:
        """Collect hardware information."""
        data: dict[str, Any] = {}

        oem = self._read_dmi({"Vendor": "sys_vendor", "Product": "product_name"})
        if oem:
            data["OEM"] = oem

        bios = self._read_dmi({"Vendor": "bios_vendor", "Version": "bios_version"})
        if bios:
            data["BIOS"] = bios

        cpu = self._get_cpu_info()
        if cpu:
            data["CPU"] = cpu

        gpus = self._get_gpu_info()
        if gpus:
            data["GPU"] = gpus

        data["RAM"] = round(psutil.virtual_memory().total / GIB, 1)

        partitions = self._get_partitions()
        if partitions:
            data["Partitions"] = partitions

        return data

    def _read_dmi(self, fields: dict[str, str]) -> dict[str, str]:
        """Read DMI/SMBIOS attributes, skipping missing ones."""
        values = {}
        for key, attr in fields.items():
            value = self.read_value(f"{DMI_DIR}/{attr}")
            if value:
                values[key] = value
        return values

    def _get_cpu_info(self) -> dict[str, Any]:
        """Get CPU model and counts."""
        cpu: dict[str, Any] = {}

        for line in self.read_lines("/proc/cpuinfo"):
            key, _, value = line.partition(":")
            key = key.strip().lower()
            if key == "vendor_id" and "Vendor" not in cpu:
                cpu["Vendor"] = value.strip()
            elif key == "model name" and "Name" not in cpu:
                cpu["Name"] = value.strip()

        logical = psutil.cpu_count(logical=True)
        if logical:
            cpu["CPUs"] = logical
        physical = psutil.cpu_count(logical=False)
        if physical:
            cpu["Cores"] = physical

        return cpu

    def _get_gpu_info(self) -> list[dict[str, str]]:
        """Get display controllers from lspci."""
        gpus = []
        output = self.probe("lspci", "-mm", "-n")
        if not output:
            return gpus

        for line in output.splitlines():
            parts = line.split('"')
            # slot "class" "vendor" "device" ...
            if len(parts) < 7:
                continue
            device_class = parts[1]
            if not device_class.startswith("03"):
                continue
            gpus.append({"Vendor": parts[3], "Model": parts[5]})

        return gpus

    def _get_partitions(self) -> list[float]:
        """Get sizes in GiB of mounted physical partitions."""
        sizes = []
        for part in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError:
                continue
            sizes.append(round(usage.total / GIB, 1))
        return sizes
