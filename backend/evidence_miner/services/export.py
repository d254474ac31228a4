"""
Plain-text export of review reports.
"""
import time
from typing import Optional

# Excel and Notepad on Windows need the BOM to detect UTF-8 (Japanese reports)
UTF8_BOM = "\ufeff"


def report_filename(timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"Evidence_Review_{timestamp_ms}.txt"


def report_bytes(report: str) -> bytes:
    return (UTF8_BOM + report).encode("utf-8")
