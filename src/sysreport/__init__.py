"""
Sysreport - Machine metadata reporting with consent and deduplication.

Collects information about the current machine, optionally asks the user
for agreement, keeps a local copy of what was decided and uploads it to a
collection endpoint.
"""

__version__ = "1.0.0"
__author__ = "Sysreport developers"

__all__ = ["__version__"]
