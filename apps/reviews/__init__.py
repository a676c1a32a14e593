"""Reviews app package.

Ratings that renters and owners leave on completed bookings, and the
per-equipment average derived from them.
"""
