"""
Customer Record Store - paged remote record access with lazy zone bootstrap.

Stores a single entity type (Customer) in a named zone of a remote,
eventually-consistent record database. The zone is created on first use and
remembered in local settings so creation happens at most once per installation.

Key Features:
    - Backend-agnostic RecordStore interface (HTTP and in-memory backends)
    - Insert-or-update with changed-keys merge policy
    - Delete by primary key
    - Full scans that follow continuation cursors until exhausted

Example:
    >>> from recordstore import get_settings
    >>> settings = get_settings()
    >>> print(settings.zone.zone_name)
"""

from recordstore.config import get_settings

__all__ = ["get_settings"]
