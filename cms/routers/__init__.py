"""
FastAPI routers grouped by area (admin, user, log).

Each module exposes a `router` that `cms.app.create_app` includes.
"""
