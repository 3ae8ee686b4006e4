"""Test helpers for building docker stream output."""

import json


def status_line(message="Downloading", current=0, total=0, layer_id="abc123"):
    """Build one docker status line as bytes."""
    return json.dumps({
        "status": message,
        "id": layer_id,
        "progressDetail": {"current": current, "total": total},
    }).encode("utf-8")
