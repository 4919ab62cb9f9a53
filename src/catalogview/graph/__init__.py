"""Relationship graphs between catalog entities.

Catalog files store each relationship on one side only (a component names its
owner; the group does not list what it owns). This module derives both
directions for a focal entity by scanning the loaded snapshot, so it stays
correct without any precomputed reverse index.
"""
