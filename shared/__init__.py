"""
Shared Kernel

Base classes and utilities shared across the domain apps: value objects,
domain events, the error taxonomy, the message bus and the unit of work.
"""
