from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Tuple

from schoollife.core.app_logger import get_logger
from schoollife.schemas.timetable import OverrideLayer, TimetableRecord
from schoollife.services.override_keys import (
    ResolutionContext,
    record_date_key,
    record_weekly_key,
    subject_key,
)
from schoollife.services.shared_store import SharedStore

DATE_EDITS_KEY = "timetableDateEditsJSON"
WEEKLY_EDITS_KEY = "timetableWeeklyEditsJSON"
REPLACE_RULES_KEY = "timetableReplaceRulesJSON"

LAYER_KEYS: Dict[OverrideLayer, str] = {
    OverrideLayer.date: DATE_EDITS_KEY,
    OverrideLayer.weekly: WEEKLY_EDITS_KEY,
    OverrideLayer.replace: REPLACE_RULES_KEY,
}

logger = get_logger(__name__)


@dataclass
class OverrideMaps:
    date: Dict[str, str] = field(default_factory=dict)
    weekly: Dict[str, str] = field(default_factory=dict)
    replace: Dict[str, str] = field(default_factory=dict)

    def layer(self, which: OverrideLayer) -> Dict[str, str]:
        return getattr(self, which.value)

    def copy(self) -> "OverrideMaps":
        return OverrideMaps(dict(self.date), dict(self.weekly), dict(self.replace))


@dataclass(frozen=True)
class OverridesChanged:
    layers: Tuple[OverrideLayer, ...]
    reload_token: str


Listener = Callable[[OverridesChanged], None]


def decode_layer(raw: str | None, name: str = "") -> Dict[str, str]:
    """Parse one stored blob; anything but a flat str->str object becomes empty."""
    if raw is None or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("override layer %s is not valid JSON, using empty", name)
        return {}
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        logger.warning("override layer %s is not a string map, using empty", name)
        return {}
    return data


def encode_layer(values: Dict[str, str]) -> str:
    return json.dumps(values, ensure_ascii=False, sort_keys=True)


class OverrideStore:
    """In-memory override layers backed by the shared store.

    Every mutation writes all three layers back in one transaction, bumps the widget
    reload token and notifies in-process listeners. One instance is shared by the API
    threadpool, so loads and mutate-then-save run under a single re-entrant lock.
    """

    def __init__(self, store: SharedStore):
        self._store = store
        self._maps = OverrideMaps()
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    @property
    def maps(self) -> OverrideMaps:
        with self._lock:
            return self._maps.copy()

    @contextmanager
    def editing(self) -> Iterator["OverrideStore"]:
        """Hold the lock across a fresh load and the edits made from it."""
        with self._lock:
            self.load()
            yield self

    # ----------------------------
    # Persistence
    # ----------------------------
    def load(self) -> OverrideMaps:
        with self._lock:
            raw = self._store.get_many(*LAYER_KEYS.values())
            self._maps = OverrideMaps(
                date=decode_layer(raw[DATE_EDITS_KEY], "date"),
                weekly=decode_layer(raw[WEEKLY_EDITS_KEY], "weekly"),
                replace=decode_layer(raw[REPLACE_RULES_KEY], "replace"),
            )
            return self._maps.copy()

    def save(self, *changed: OverrideLayer) -> str:
        with self._lock:
            token = self._store.touch_reload(
                {key: encode_layer(self._maps.layer(layer)) for layer, key in LAYER_KEYS.items()}
            )
            listeners = list(self._listeners)
        event = OverridesChanged(layers=changed or tuple(OverrideLayer), reload_token=token)
        for listener in listeners:
            # already committed; a bad observer must not fail the write
            try:
                listener(event)
            except Exception:
                logger.exception("override listener %r failed", listener)
        return token

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----------------------------
    # CRUD per layer
    # ----------------------------
    def set_date_override(self, key: str, text: str) -> None:
        with self._lock:
            self._maps.date[key] = text
            self.save(OverrideLayer.date)

    def clear_date_override(self, key: str) -> None:
        with self._lock:
            self._maps.date.pop(key, None)
            self.save(OverrideLayer.date)

    def set_weekly_override(self, key: str, text: str) -> None:
        with self._lock:
            self._maps.weekly[key] = text
            self.save(OverrideLayer.weekly)

    def clear_weekly_override(self, key: str) -> None:
        with self._lock:
            self._maps.weekly.pop(key, None)
            self.save(OverrideLayer.weekly)

    def set_replace_rule(self, original: str, text: str) -> bool:
        key = original.strip()
        if not key:
            logger.warning("ignoring replace rule with empty original subject")
            return False
        with self._lock:
            self._maps.replace[key] = text
            self.save(OverrideLayer.replace)
        return True

    def clear_replace_rule(self, original: str) -> None:
        with self._lock:
            self._maps.replace.pop(original.strip(), None)
            self.save(OverrideLayer.replace)

    def clear_all_for_record(self, record: TimetableRecord, ctx: ResolutionContext) -> None:
        with self._lock:
            self._maps.date.pop(record_date_key(record, ctx), None)
            self._maps.weekly.pop(record_weekly_key(record, ctx), None)
            original = subject_key(record)
            if original:
                self._maps.replace.pop(original, None)
            self.save()
