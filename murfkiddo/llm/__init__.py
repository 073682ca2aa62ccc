"""Generative text backend package exports."""

from murfkiddo.llm.base import GenerativeBackend
from murfkiddo.llm.factory import create_llm_backend

__all__ = [
    "GenerativeBackend",
    "create_llm_backend",
]
