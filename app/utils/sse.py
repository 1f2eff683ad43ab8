# app/utils/sse.py
"""Server-Sent Events responses backed by an EventStream."""

import json

from flask import Response, stream_with_context

from app.services.event_stream import ChangeEvent, EventStream


def format_event(event: ChangeEvent) -> str:
    data = json.dumps(event.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return f"event: {event.kind}\nid: {event.document_id}\ndata: {data}\n\n"


def sse_response(stream: EventStream) -> Response:
    def generate():
        try:
            yield ": connected\n\n"
            for event in stream:
                if event is None:
                    yield ": keepalive\n\n"
                else:
                    yield format_event(event)
        finally:
            # Reached on client disconnect (GeneratorExit) as well
            stream.close()

    response = Response(stream_with_context(generate()), mimetype="text/event-stream")
    response.headers["Cache-Control"] = "no-cache"
    response.headers["X-Accel-Buffering"] = "no"
    return response
