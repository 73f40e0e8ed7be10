"""
Core utilities shared across the CMS API.

Configuration, typed exceptions and their handlers, logging setup, password
hashing, pagination and the route metadata registry live here; routers and
repositories depend on these primitives instead of each other.
"""
