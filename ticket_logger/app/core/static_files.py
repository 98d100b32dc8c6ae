"""
Static frontend bundle serving with single-page-application fallback.
"""

import os

from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from ticket_logger.app.core.exceptions import ROUTE_NOT_FOUND_MESSAGE

INDEX_DOCUMENT = "index.html"


class SPAStaticFiles(StaticFiles):
    """
    Serve files from the bundle directory.

    Unknown paths get the bundle's `index.html` so client-side routing works.
    Paths under `api/` never fall back: they answer the JSON route-not-found 404.
    """

    def __init__(self, directory: str, api_prefix: str = "api"):
        super().__init__(directory=directory, html=True)
        self.api_prefix = api_prefix

    async def get_response(self, path: str, scope: Scope) -> Response:
        if path.split(os.sep, 1)[0] == self.api_prefix:
            raise HTTPException(status_code=404, detail=ROUTE_NOT_FOUND_MESSAGE)
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
        return await super().get_response(INDEX_DOCUMENT, scope)
