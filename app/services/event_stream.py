# app/services/event_stream.py
"""
Live change streams over Firestore listeners.

`EventHub.subscribe(topic)` returns an `EventStream`: iterating it registers
an `on_snapshot` listener (lazily, on the first `next()`), then yields a
`ChangeEvent` for every document change until the stream is closed. When no
change arrives for `keepalive_seconds` the stream yields `None` so callers can
keep idle connections alive.

Topics:
    posts                   the feed (newest 50 posts)
    posts/<post_id>         a single post (votes, deletion)
    posts/<post_id>/comments
    presence                the most recently seen users (public fields only)
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

from firebase_admin import firestore

from app.utils.datetime_utils import DateTimeUtils

_CLOSED = object()

# (document_id, document data) -> payload sent to subscribers
Serializer = Callable[[str, Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class ChangeEvent:
    topic: str
    kind: str  # "added" | "modified" | "removed"
    document_id: str
    data: Optional[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        payload = {"topic": self.topic, "id": self.document_id}
        if self.data is not None:
            payload["data"] = DateTimeUtils.for_json(self.data)
        return payload


class EventStream:
    """Lazy, infinite, cancellable sequence of ChangeEvents for one topic."""

    def __init__(self, topic: str, target: Any, keepalive_seconds: float = 15.0,
                 serializer: Optional[Serializer] = None):
        self.topic = topic
        self._target = target
        self._serializer = serializer
        self._keepalive_seconds = keepalive_seconds
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._closed = threading.Event()
        self._watch = None
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def _open(self):
        with self._lock:
            if self._watch is None and not self.closed:
                self._watch = self._target.on_snapshot(self._on_snapshot)
                logging.info(f"Listener registered (topic: {self.topic})")

    def _on_snapshot(self, snapshots, changes, read_time):
        # Runs on the Firestore listener thread
        for change in changes:
            kind = change.type.name.lower()
            document = change.document
            data = None if kind == "removed" else document.to_dict()
            if data is not None and self._serializer is not None:
                data = self._serializer(document.id, data)
            self._queue.put(ChangeEvent(self.topic, kind, document.id, data))

    def __iter__(self) -> Iterator[Optional[ChangeEvent]]:
        self._open()
        try:
            while not self.closed:
                try:
                    item = self._queue.get(timeout=self._keepalive_seconds)
                except queue.Empty:
                    yield None
                    continue
                if item is _CLOSED:
                    break
                yield item
        finally:
            self.close()

    def close(self):
        """Unsubscribe the listener. Safe to call more than once."""
        with self._lock:
            if self.closed:
                return
            self._closed.set()
            watch, self._watch = self._watch, None
        self._queue.put(_CLOSED)
        if watch is not None:
            try:
                watch.unsubscribe()
            except Exception as e:
                logging.warning(f"Listener unsubscribe failed (topic: {self.topic}): {e}")
            logging.info(f"Listener closed (topic: {self.topic})")

    def __enter__(self) -> "EventStream":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class EventHub:
    """Resolves topic names to Firestore references and hands out streams."""

    def __init__(self, db, feed_limit: int = 50, presence_limit: int = 50, keepalive_seconds: float = 15.0,
                 serializers: Optional[Dict[str, Serializer]] = None):
        self.db = db
        self.feed_limit = feed_limit
        self.presence_limit = presence_limit
        self.keepalive_seconds = keepalive_seconds
        # topic -> payload projection, for collections that hold private fields
        self.serializers = dict(serializers or {})
        self._resolvers: Dict[int, Callable[..., Any]] = {
            1: self._resolve_collection,
            2: self._resolve_post,
            3: self._resolve_comments,
        }

    def subscribe(self, topic: str) -> EventStream:
        parts = [p for p in topic.strip("/").split("/") if p]
        resolver = self._resolvers.get(len(parts))
        target = resolver(*parts) if resolver else None
        if target is None:
            raise ValueError(f"Unknown topic: {topic}")
        name = "/".join(parts)
        return EventStream(name, target, keepalive_seconds=self.keepalive_seconds,
                           serializer=self.serializers.get(name))

    def _resolve_collection(self, name: str):
        if name == "posts":
            return (self.db.collection("posts")
                    .order_by("createdAt", direction=firestore.Query.DESCENDING)
                    .limit(self.feed_limit))
        if name == "presence":
            return (self.db.collection("users")
                    .order_by("lastSeen", direction=firestore.Query.DESCENDING)
                    .limit(self.presence_limit))
        return None

    def _resolve_post(self, collection: str, post_id: str):
        if collection != "posts":
            return None
        return self.db.collection("posts").document(post_id)

    def _resolve_comments(self, collection: str, post_id: str, sub: str):
        if collection != "posts" or sub != "comments":
            return None
        return self.db.collection("posts").document(post_id).collection("comments").order_by("createdAt")
