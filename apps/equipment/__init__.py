"""Equipment app package.

Holds the equipment listings that renters book. Listings are owned by
users with the owner role; the booking services only read them (price
snapshot, availability flag, owner reference).
"""
