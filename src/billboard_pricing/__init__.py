"""
Billboard Pricing Package

Pricing computation and pricing-zone synchronization for billboard rentals.
Derives prices through Zone → Multiplier → Price and keeps the priced zones
in step with the municipalities found in the billboard inventory.
"""

__version__ = "1.0.0"
