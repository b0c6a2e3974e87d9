"""
Deletion recovery package.

Modules
=======

``signals``
    Registry of deletion-signal detectors, one module per upstream encoding.
``correlator``
    :class:`DeletionCorrelator` matches detected signals against the cache.
``resolver``
    :class:`RecoveryResolver` rebuilds the deleted content and its media.
``composer``
    Formats recovered content into owner notifications.
``pipeline``
    :class:`RecoveryPipeline` schedules recovery, persistence and delivery.
``contracts``
    Protocols for the transport, store and media collaborators.
"""

from .correlator import DeletionCorrelator
from .pipeline import RecoveryPipeline
from .resolver import RecoveryResolver, Resolution

__all__ = ["DeletionCorrelator", "RecoveryPipeline", "RecoveryResolver", "Resolution"]
