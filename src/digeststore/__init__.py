"""
digeststore: content-addressable blob storage on a plain filesystem.

Immutable blobs are keyed by the digest of their own bytes and verified on
every read; each blob can carry a small key/value metadata sidecar.
"""

__version__ = "0.1.0"
