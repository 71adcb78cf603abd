"""
Utils Package

JSON file helpers.
"""

from .serialization import load_json, save_json, dumps

__all__ = [
    "load_json",
    "save_json",
    "dumps",
]
