"""
Shared kernel of the reservation service: aggregate and event base
classes, the TimeRange value object, the unit of work and the in-process
message bus.
"""
