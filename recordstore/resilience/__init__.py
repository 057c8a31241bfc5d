"""
Resilience patterns for the remote record store.

Transport-level retry lives with the backend; RecordStoreClient never retries.
"""

from recordstore.resilience.retry import with_retry

__all__ = ["with_retry"]
