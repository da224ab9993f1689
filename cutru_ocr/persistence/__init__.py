"""
Data persistence layer.

Stores batch results as JSON and exports records to CSV.
"""

from .json_store import JSONStore, load_json, write_records_csv

__all__ = [
    "JSONStore",
    "load_json",
    "write_records_csv",
]
