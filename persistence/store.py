"""
runner_evo module: persistence/store.py

JSON file storage for checkpoints and best weights, plus a background saver
so the simulation never waits on disk.
"""

from __future__ import annotations
import json
import logging
import os
import queue
import tempfile
import threading
from typing import Any, Callable, Optional, Tuple

import config
from persistence.checkpoint import BestWeightsPayload, TrainingCheckpoint

logger = logging.getLogger(__name__)

# errors from parsing records that are valid JSON but the wrong shape
MALFORMED = (AttributeError, KeyError, TypeError, ValueError)


class PersistenceError(RuntimeError):
    """Stored data could not be read or written."""


def _write_temp_json(path: str, data: Any) -> str:
    """Dump ``data`` to a fresh temp file next to ``path`` and return its name."""
    fd, tmp = tempfile.mkstemp(prefix=os.path.basename(path) + ".", suffix=".tmp", dir=os.path.dirname(path) or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except Exception:
        os.unlink(tmp)
        raise
    return tmp


def atomic_write_json(path: str, data: Any) -> None:
    tmp = _write_temp_json(path, data)
    try:
        os.replace(tmp, path)
    except OSError:
        os.unlink(tmp)
        raise


class JsonFileStore:
    def __init__(self, directory: str = config.DATA_DIR):
        self.directory = directory
        self.checkpoint_path = os.path.join(directory, config.CHECKPOINT_FILE)
        self.best_weights_path = os.path.join(directory, config.BEST_WEIGHTS_FILE)

    def _ensure_dir(self) -> None:
        os.makedirs(self.directory, exist_ok=True)

    def _read(self, path: str) -> Optional[Any]:
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            # ValueError covers both bad JSON and bytes that are not UTF-8
            raise PersistenceError(f"could not read {path}: {e}") from e

    def _write(self, path: str, data: Any) -> None:
        try:
            self._ensure_dir()
            atomic_write_json(path, data)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"could not write {path}: {e}") from e

    def load_checkpoint(self) -> Optional[TrainingCheckpoint]:
        data = self._read(self.checkpoint_path)
        if data is None:
            return None
        try:
            return TrainingCheckpoint.from_dict(data)
        except MALFORMED as e:
            raise PersistenceError(f"malformed checkpoint: {e}") from e

    def save_checkpoint(self, checkpoint: TrainingCheckpoint) -> None:
        self._write(self.checkpoint_path, checkpoint.to_dict())

    def load_best_weights(self) -> Optional[BestWeightsPayload]:
        data = self._read(self.best_weights_path)
        if data is None:
            return None
        try:
            return BestWeightsPayload.from_dict(data)
        except MALFORMED as e:
            raise PersistenceError(f"malformed best weights: {e}") from e

    def save_best_weights(self, payload: BestWeightsPayload) -> None:
        self._write(self.best_weights_path, payload.to_dict())

    def reset(self, checkpoint: TrainingCheckpoint, best: BestWeightsPayload) -> None:
        """
        Replace both records. Both temp files are fully written before either
        live file is swapped.
        """
        written = []
        try:
            self._ensure_dir()
            written.append((_write_temp_json(self.checkpoint_path, checkpoint.to_dict()), self.checkpoint_path))
            written.append((_write_temp_json(self.best_weights_path, best.to_dict()), self.best_weights_path))
            while written:
                tmp, path = written.pop(0)
                os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            for tmp, _ in written:
                os.unlink(tmp)
            raise PersistenceError(f"could not reset training files: {e}") from e


Job = Tuple[Callable[..., None], Tuple[Any, ...]]


class BackgroundSaver:
    """
    Fire-and-forget wrapper around a store. Writes run in submission order on
    a daemon worker thread. When the queue is full a save is dropped, but a
    reset always waits for room so it lands after every earlier save. Loads
    wait for pending writes first.
    """

    def __init__(self, store: JsonFileStore, maxsize: int = config.SAVE_QUEUE_SIZE):
        self.store = store
        self.save_queue: "queue.Queue[Optional[Job]]" = queue.Queue(maxsize=maxsize)
        self.worker_thread = threading.Thread(target=self._save_worker, daemon=True)
        self.worker_thread.start()

    def _save_worker(self) -> None:
        while True:
            item = self.save_queue.get()
            if item is None:
                self.save_queue.task_done()
                break
            fn, args = item
            try:
                fn(*args)
            except PersistenceError as e:
                logger.warning("Background save failed: %s", e)
            finally:
                self.save_queue.task_done()

    def _submit(self, fn: Callable[..., None], *args: Any) -> None:
        try:
            self.save_queue.put_nowait((fn, args))
        except queue.Full:
            logger.info("Save queue full, skipping write")

    def save_checkpoint(self, checkpoint: TrainingCheckpoint) -> None:
        self._submit(self.store.save_checkpoint, checkpoint)

    def save_best_weights(self, payload: BestWeightsPayload) -> None:
        self._submit(self.store.save_best_weights, payload)

    def load_checkpoint(self) -> Optional[TrainingCheckpoint]:
        self.flush()
        return self.store.load_checkpoint()

    def load_best_weights(self) -> Optional[BestWeightsPayload]:
        self.flush()
        return self.store.load_best_weights()

    def reset(self, checkpoint: TrainingCheckpoint, best: BestWeightsPayload) -> None:
        self.save_queue.put((self.store.reset, (checkpoint, best)))

    def flush(self) -> None:
        self.save_queue.join()

    def shutdown(self, timeout: float = 5.0) -> None:
        self.save_queue.put(None)
        self.worker_thread.join(timeout=timeout)
