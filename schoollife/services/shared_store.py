"""Cross-process key-value store.

The API process and the widget runner never talk to each other directly; everything
they share goes through the ``shared_values`` table. There is no locking: each write
replaces whole values, last writer wins.
"""
from __future__ import annotations

import uuid
from typing import Callable, Dict, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from schoollife.core.app_logger import get_logger
from schoollife.models.shared_value import SharedValue

RELOAD_TOKEN_KEY = "widgetReloadToken"

logger = get_logger(__name__)


class SharedStore:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    # ----------------------------
    # Reads (degrade to None)
    # ----------------------------
    def get(self, key: str) -> str | None:
        try:
            with self._session_factory() as session:
                row = session.get(SharedValue, key)
                return row.value if row else None
        except SQLAlchemyError:
            logger.exception("shared store read failed for %s", key)
            return None

    def get_many(self, *keys: str) -> Dict[str, str | None]:
        out: Dict[str, str | None] = {k: None for k in keys}
        try:
            with self._session_factory() as session:
                rows = session.execute(
                    select(SharedValue).where(SharedValue.key.in_(keys))
                ).scalars().all()
        except SQLAlchemyError:
            logger.exception("shared store read failed for %s", ", ".join(keys))
            return out
        for row in rows:
            out[row.key] = row.value
        return out

    # ----------------------------
    # Writes (errors propagate)
    # ----------------------------
    def set(self, key: str, value: str | None) -> None:
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, str | None]) -> None:
        """Write every key in one transaction."""
        with self._session_factory() as session:
            try:
                for key, value in values.items():
                    row = session.get(SharedValue, key)
                    if row is None:
                        session.add(SharedValue(key=key, value=value))
                    else:
                        row.value = value
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("shared store write failed for %s", ", ".join(values))
                raise

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            try:
                row = session.get(SharedValue, key)
                if row is not None:
                    session.delete(row)
                    session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("shared store delete failed for %s", key)
                raise

    # ----------------------------
    # Reload signal for the widget runner
    # ----------------------------
    def reload_token(self) -> str | None:
        return self.get(RELOAD_TOKEN_KEY)

    def touch_reload(self, values: Mapping[str, str | None] | None = None) -> str:
        """Write ``values`` (if any) together with a fresh reload token."""
        token = uuid.uuid4().hex
        self.set_many({**(values or {}), RELOAD_TOKEN_KEY: token})
        return token
