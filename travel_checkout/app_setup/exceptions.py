"""
Gestionnaire d'exceptions HTTP.
- 401: session détruite (cookie + session), puis
  * client HTML: redirection vers la page de connexion avec returnUrl
  * client API: JSON {"detail", "redirect"} pour que le front redirige
- 403: même redirection côté HTML, JSON standard côté API
- autres: JSON {"detail"} standard
"""
import urllib.parse
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from travel_checkout.config import FRONTEND_BASE_URL, LOGIN_PATH
from travel_checkout.utils.security import clear_session


def login_url(request: Request) -> str:
    return_url = urllib.parse.quote(request.url.path, safe="/")
    return f"{FRONTEND_BASE_URL}{LOGIN_PATH}?returnUrl={return_url}"

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def redirect_on_auth_errors(request: Request, exc: HTTPException):
        if exc.status_code in (401, 403):
            accept = (request.headers.get("accept") or "").lower()
            if "text/html" in accept:
                response = RedirectResponse(url=login_url(request), status_code=HTTP_303_SEE_OTHER)
            elif exc.status_code == 401:
                response = JSONResponse(status_code=401, content={"detail": exc.detail, "redirect": login_url(request)})
            else:
                response = JSONResponse(status_code=403, content={"detail": exc.detail})
            if exc.status_code == 401:
                clear_session(request, response)
            return response
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
