"""Job discovery: classification, metadata, aggregates and the tree walker."""

from .aggregates import constituent_drv_paths, is_aggregate, resolve_constituents
from .classifier import Classification, NodeKind, classify
from .metadata import query_meta_bool, query_meta_int, query_meta_string, query_meta_strings
from .walker import JobWalker, WalkStats

__all__ = [
    "Classification",
    "JobWalker",
    "NodeKind",
    "WalkStats",
    "classify",
    "constituent_drv_paths",
    "is_aggregate",
    "query_meta_bool",
    "query_meta_int",
    "query_meta_string",
    "query_meta_strings",
    "resolve_constituents",
]
