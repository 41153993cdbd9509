"""
Shared Kernel

Building blocks shared by the domain apps: calendar-day arithmetic,
value objects, status lifecycles, the unit of work and the message bus.
"""
