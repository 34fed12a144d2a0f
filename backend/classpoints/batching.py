"""
Write batches that commit every MAX_BATCH_OPS operations.

Firestore rejects batches above its per-commit write limit, so large
roster operations are split into several commits. Each commit is atomic on
its own; the sequence as a whole is not.
"""

from __future__ import annotations

from typing import Any, Dict

from core.logger import logger

# Per-commit write cap used for every chunked operation
MAX_BATCH_OPS = 400


class ChunkedBatch:
    """Collects set/delete operations and commits every `limit` of them."""

    def __init__(self, client: Any, limit: int = MAX_BATCH_OPS):
        if limit <= 0:
            raise ValueError("limit must be positive")
        self._client = client
        self._limit = limit
        self._batch = client.batch()
        self._pending = 0
        self.committed = 0
        self.commits = 0

    def set(self, ref: Any, data: Dict[str, Any], merge: bool = True) -> None:
        self._batch.set(ref, data, merge=merge)
        self._after_op()

    def delete(self, ref: Any) -> None:
        self._batch.delete(ref)
        self._after_op()

    def _after_op(self) -> None:
        self._pending += 1
        if self._pending >= self._limit:
            self._flush()

    def _flush(self) -> None:
        self._batch.commit()
        self.commits += 1
        self.committed += self._pending
        logger.debug(f"Committed batch of {self._pending} writes")
        self._batch = self._client.batch()
        self._pending = 0

    def commit(self) -> int:
        """Commit whatever is still pending; returns total operations committed."""
        if self._pending:
            self._flush()
        return self.committed

    def __enter__(self) -> "ChunkedBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Only flush the tail when the block finished cleanly
        if exc_type is None:
            self.commit()
