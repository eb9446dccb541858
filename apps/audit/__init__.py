"""Audit app package.

Append-only log of what happened to reservations and by whom.
"""
