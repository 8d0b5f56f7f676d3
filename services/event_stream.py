import json
from typing import Any

from services.exceptions import ProtocolError, UpstreamError

RAW_PREVIEW_LIMIT = 300


def _error_message(raw: str) -> str:
    try:
        decoded = json.loads(raw)
    except ValueError:
        return raw or "Unknown event-stream error"

    if decoded is None or decoded == "":
        return "Unknown upstream error"
    if isinstance(decoded, dict):
        message = decoded.get("error") or decoded.get("message")
        if message:
            return message if isinstance(message, str) else json.dumps(message)
    if isinstance(decoded, str):
        return decoded
    return json.dumps(decoded)


def extract_complete_event_data(stream_text: str) -> Any:
    """Return the decoded payload of the first `complete` event in an event stream.

    Data lines belong to the most recently declared event name. Progress
    events are skipped; an `error` event raises UpstreamError and a stream
    with neither terminal event raises ProtocolError.
    """
    current_event = ""

    for line in stream_text.split("\n"):
        if line.startswith("event:"):
            current_event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data = line[len("data:"):].strip()
            if current_event == "complete":
                try:
                    return json.loads(data)
                except ValueError:
                    raise ProtocolError(f"Malformed complete event payload: {data[:RAW_PREVIEW_LIMIT]}")
            if current_event == "error":
                raise UpstreamError(_error_message(data))

    raise ProtocolError(f"Unexpected event-stream response: {stream_text[:RAW_PREVIEW_LIMIT]}")
