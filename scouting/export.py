"""Read-only views of a finished record for QR handoff and display."""

from __future__ import annotations

from .csv_codec import parse_row
from .record_schema import detect_version, headers_for


def build_display_rows(csv_text: str) -> list[dict[str, str]]:
    """Pair each header with its value; missing or empty values show as "-"."""
    values = parse_row(csv_text)
    if values is None:
        return []

    version = detect_version(len(values))
    headers = headers_for(version, len(values))
    return [
        {"header": header, "value": values[index] if values[index] != "" else "-"}
        for index, header in enumerate(headers)
    ]


def qr_info(csv_text: str) -> dict[str, str] | None:
    """Small caption shown above the QR symbol."""
    values = parse_row(csv_text)
    if not values:
        return None
    return {
        "match": values[1] if len(values) > 1 else "",
        "driver_station": values[3] if len(values) > 3 else "",
    }


def build_export(csv_text: str) -> dict:
    """Everything the QR screen needs; the payload is the raw record text."""
    return {
        "payload": csv_text,
        "info": qr_info(csv_text),
        "table": build_display_rows(csv_text),
    }
