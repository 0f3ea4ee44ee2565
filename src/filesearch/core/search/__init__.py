from .args import build_search_args
from .backends import create_backend
from .base import Accept, ListingBackend
from .ripgrep import RipgrepBackend
from .walker import WalkBackend

__all__ = [
    "Accept",
    "ListingBackend",
    "RipgrepBackend",
    "WalkBackend",
    "build_search_args",
    "create_backend",
]
