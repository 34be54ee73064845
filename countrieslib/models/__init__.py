from countrieslib.models.base import Base
from countrieslib.models.cached_payload import CachedPayload

__all__ = ["Base", "CachedPayload"]
