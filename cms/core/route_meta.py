"""
Route metadata registry.

Every route declared through `LinRouter` carries an authority name (`auth`) and
the `module` it belongs to. Mounted routes are recorded in a process-wide
registry keyed by `"<METHOD> <name>"`; the registry is the catalogue of
authorities that can be dispatched to permission groups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from fastapi import APIRouter, params


@dataclass(frozen=True)
class RouteMeta:
    auth: str
    module: str
    mount: bool = True


route_meta_infos: dict[str, RouteMeta] = {}


def register_route_meta(method: str, name: str, meta: RouteMeta) -> str:
    if not (meta.auth and meta.module):
        raise ValueError("auth and module must not be empty when mounting a route")
    endpoint = f"{method.upper()} {name}"
    route_meta_infos[endpoint] = meta
    return endpoint


def find_meta_by_auth(auth: str) -> Optional[RouteMeta]:
    for meta in route_meta_infos.values():
        if meta.auth == auth:
            return meta
    return None


def authority_tree() -> dict[str, dict[str, list[str]]]:
    """Group mounted endpoints as {module: {auth: [endpoint, ...]}}."""
    tree: dict[str, dict[str, list[str]]] = {}
    for endpoint, meta in route_meta_infos.items():
        tree.setdefault(meta.module, {}).setdefault(meta.auth, []).append(endpoint)
    return tree


class LinRouter(APIRouter):
    """APIRouter whose `lin_*` decorators attach RouteMeta to each route."""

    def _lin_route(
        self,
        method: str,
        name: str,
        path: str,
        *,
        auth: str,
        module: str,
        mount: bool = True,
        dependencies: Sequence[params.Depends] | None = None,
        **kwargs: Any,
    ) -> Callable:
        meta = RouteMeta(auth=auth, module=module, mount=mount)
        if mount:
            register_route_meta(method, name, meta)
        decorator = self.api_route(
            path,
            methods=[method],
            name=name,
            dependencies=dependencies,
            **kwargs,
        )

        def wrapper(func: Callable) -> Callable:
            func.route_meta = meta  # type: ignore[attr-defined]
            return decorator(func)

        return wrapper

    def lin_get(self, name: str, path: str, **kwargs: Any) -> Callable:
        return self._lin_route("GET", name, path, **kwargs)

    def lin_post(self, name: str, path: str, **kwargs: Any) -> Callable:
        return self._lin_route("POST", name, path, **kwargs)

    def lin_put(self, name: str, path: str, **kwargs: Any) -> Callable:
        return self._lin_route("PUT", name, path, **kwargs)

    def lin_delete(self, name: str, path: str, **kwargs: Any) -> Callable:
        return self._lin_route("DELETE", name, path, **kwargs)
