"""Stage event builders for run transcripts."""

from __future__ import annotations

import json
from typing import Any

from .models import domain_utc_now


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured stage event for the run transcript.

    Args:
        stage: Stage name, e.g. `probe`, `reconcile` or `retry`.
        status: Stage status marker.
        details: Optional structured details object.

    Returns:
        dict[str, object]: Structured stage event.

    Raises:
        ValueError: Raised when stage or status is blank.
    """

    if not stage.strip():
        raise ValueError("stage must not be blank")
    if not status.strip():
        raise ValueError("status must not be blank")

    event_payload: dict[str, object] = {
        "stage": stage.strip(),
        "status": status.strip(),
        "at_utc": domain_utc_now().isoformat(),
    }
    if details:
        event_payload["details"] = details
    return event_payload


def domain_render_stage_event(event: dict[str, object]) -> str:
    """Render a stage event as one compact JSON line.

    Values that are not JSON-native (exceptions, datetimes) are rendered with `str`.

    Args:
        event: Stage event built by `domain_build_stage_event`.

    Returns:
        str: Single-line JSON document.
    """

    return json.dumps(event, sort_keys=True, default=str, separators=(",", ":"))
