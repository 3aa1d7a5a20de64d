# OWSYNC Build Module
# Dependency installation and archive packaging

from owsync.build.builder import Builder, create_zip_archive, run_install

__all__ = [
    "Builder",
    "create_zip_archive",
    "run_install",
]
