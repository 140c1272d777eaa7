"""Concurrent batch fetching for pre-loading id → value maps."""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)


def chunked(keys, size):
    if size < 1:
        raise ValueError("batch size must be positive")
    return [keys[i:i + size] for i in range(0, len(keys), size)]


def _run_chunk(fetch, chunk, number):
    """Fetch one chunk. Errors (and anything raised) come back as a value."""
    try:
        return fetch(chunk), None
    except Exception as e:
        return None, f"batch {number} failed: {e}"


def batch_fetch(keys, fetch, batch_size=100, max_workers=4):
    """Fetch ``keys`` in chunks of ``batch_size`` on a bounded thread pool.

    ``fetch`` takes a list of keys and returns a dict. A chunk that fails is
    logged and dropped, so the merged result may be missing keys; callers must
    treat it as authoritative only for the keys present. Small inputs are
    fetched inline.
    """
    keys = list(dict.fromkeys(keys))
    if not keys:
        return {}
    if len(keys) <= batch_size:
        data, error = _run_chunk(fetch, keys, 1)
        if error:
            logger.error("Batch fetch failed: %s", error)
            return {}
        return dict(data or {})

    chunks = chunked(keys, batch_size)
    merged = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(chunks)))) as pool:
        futures = [
            pool.submit(_run_chunk, fetch, chunk, number)
            for number, chunk in enumerate(chunks, start=1)
        ]
        for future in as_completed(futures):
            data, error = future.result()
            if error:
                logger.error("Batch fetch failed: %s", error)
                continue
            merged.update(data or {})
    return merged


def in_app_context(fetch):
    """Wrap a store-backed ``fetch`` so pool threads run it in an app context.

    Called inline (already inside a context) it runs as is; on a worker thread
    it pushes a context for the current app, giving the chunk its own session.
    """
    app = current_app._get_current_object()

    def run(chunk):
        if has_app_context():
            return fetch(chunk)
        with app.app_context():
            return fetch(chunk)

    return run
