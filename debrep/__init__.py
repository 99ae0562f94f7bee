"""
debrep - Debian package build pipeline.

Builds packages from heterogeneous sources with sbuild and publishes them into
a shared package pool, skipping packages whose inputs did not change.
"""

__version__ = "0.1.0"
