"""
Utilities - game registry, tier configuration and factories.
"""
