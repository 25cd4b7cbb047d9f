"""Serve a pre-built single-page front end.

Files under the bundle directory are served as-is. Any other path outside
/api falls back to index.html so client-side routes survive a reload or a
deep link.
"""

from pathlib import Path, PurePosixPath

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.types import Scope

INDEX_FILE = "index.html"


class SPAStaticFiles(StaticFiles):
    """StaticFiles that answers unknown non-API paths with index.html."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404 or _is_api_path(path):
                raise
            return await super().get_response(INDEX_FILE, scope)


def _is_api_path(path: str) -> bool:
    parts = PurePosixPath(path.replace("\\", "/")).parts
    return bool(parts) and parts[0] == "api"


def mount_frontend(app: FastAPI, dist_path: str) -> bool:
    """Mount the bundle at / when dist_path is a directory. Call after the routers."""
    if not dist_path or not Path(dist_path).is_dir():
        return False
    app.mount("/", SPAStaticFiles(directory=dist_path, html=True), name="frontend")
    return True
