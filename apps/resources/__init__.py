"""Resources app package.

Assets, spaces and vehicles that members of an organization reserve.
"""
