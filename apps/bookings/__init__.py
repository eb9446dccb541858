"""Bookings app package.

The reservation engine for shared assets, spaces and vehicles: recurrence
expansion, double-booking prevention, approval policies, the reservation
lifecycle and vehicle return reconciliation. Overlaps are rejected inside
one database transaction with the resource row locked, and by an exclusion
constraint where PostgreSQL is used.
"""
