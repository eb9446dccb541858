"""Organizations app package.

Tenants, their members (profiles with department and role) and the
approval policy table that decides who may approve reservations.
"""
