"""
Expose common test utilities so tests can import directly:
    from tests import make_record, make_payload, photo_name
"""

from .utils import make_payload, make_record, photo_name

__all__ = ["make_record", "make_payload", "photo_name"]
