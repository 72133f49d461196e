"""
CRD Apply Engine - server-side apply and wait for Kubernetes custom resources.

This package provides the synchronization engine shared by every generated
custom resource:
- Server-side apply of a desired-state document
- Optional post-apply waits on relaxed JSONPath conditions
- Idempotent deletion with optional wait for absence
- Thin per-kind adapters over one generic engine
"""

__version__ = "0.1.0"
