"""
dracpu/shared — data model, quantities and settings used across the package.
"""
