"""
Bundle Pricing Package

Pricing and validation engine for service bundles in a business console.
Derives bundle prices from selected services (sum, fixed, discount) in
integer minor currency units and filters/sorts bundle lists for display.
"""

__version__ = "1.0.0"
