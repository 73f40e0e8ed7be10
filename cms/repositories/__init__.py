"""
Persistence adapters (DAOs).

Each repository issues SQLAlchemy calls for one area of the admin backend;
routers and services depend on them instead of opening sessions themselves.
"""
