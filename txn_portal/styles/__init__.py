"""Shared styles."""

from txn_portal.styles.base import BASE_CSS

__all__ = ["BASE_CSS"]
