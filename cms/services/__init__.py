"""
High-level use cases for the CMS API.

Service modules orchestrate repositories to implement login, registration,
session handling and operation logging. Routers call these services or the
admin DAO directly.
"""
