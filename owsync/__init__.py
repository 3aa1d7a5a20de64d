"""owsync - OpenWhisk package deployment with content fingerprints.

Deploys every subdirectory of a root directory as an action of one
OpenWhisk package, uploading only actions whose content changed and
deleting remote actions that no longer exist locally.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "SyncEngine",
    "ActionDescriptor",
    "PackageDescriptor",
    "DeployResult",
    "OpenWhiskGateway",
    "Builder",
    "fingerprint",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("SyncEngine", "ActionDescriptor", "PackageDescriptor", "DeployResult"):
        from owsync import sync

        return getattr(sync, name)
    if name == "OpenWhiskGateway":
        from owsync.remote import OpenWhiskGateway

        return OpenWhiskGateway
    if name == "Builder":
        from owsync.build import Builder

        return Builder
    if name == "fingerprint":
        from owsync.utils.hashing import fingerprint

        return fingerprint
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
