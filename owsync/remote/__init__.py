# OWSYNC Remote Module
# Remote state gateway for the serverless platform

from owsync.remote.gateway import OpenWhiskGateway, get_annotation, merge_annotations

__all__ = [
    "OpenWhiskGateway",
    "get_annotation",
    "merge_annotations",
]
