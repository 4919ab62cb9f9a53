"""Catalog entities, references and the existence index.

Everything here is pure and total: parsing a reference or building an index
never raises, whatever the input looks like.
"""
