# routes_auth.py
"""
Sign-in, sign-up, and logout.

The session secret goes into an httpOnly cookie; every later request hands
it back explicitly through app.deps.get_session_secret.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.config import Settings
from app.deps import get_app_settings, get_current_user, get_db, get_session_secret, templates
from app.services.user_actions import AuthenticationError, logout, sign_in, sign_up
from models import User, UserSession

router = APIRouter()


def _signed_in_redirect(session: UserSession, settings: Settings) -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session.secret,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,  # plain http on localhost
    )
    return response


# -------------------------------------------------------------------
# Sign in
# -------------------------------------------------------------------

@router.get("/sign-in", response_class=HTMLResponse)
def sign_in_page(request: Request, user: Optional[User] = Depends(get_current_user)):
    if user is not None:
        return RedirectResponse(url="/", status_code=303)
    return templates.TemplateResponse(request, "sign_in.html", {"error": None, "email": ""})


@router.post("/sign-in", response_class=HTMLResponse)
def sign_in_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        session = sign_in(db, email, password)
    except AuthenticationError as e:
        return templates.TemplateResponse(
            request,
            "sign_in.html",
            {"error": str(e), "email": email},
            status_code=400,
        )
    return _signed_in_redirect(session, settings)


# -------------------------------------------------------------------
# Sign up
# -------------------------------------------------------------------

@router.get("/sign-up", response_class=HTMLResponse)
def sign_up_page(request: Request, user: Optional[User] = Depends(get_current_user)):
    if user is not None:
        return RedirectResponse(url="/", status_code=303)
    return templates.TemplateResponse(request, "sign_up.html", {"error": None, "form": {}})


@router.post("/sign-up", response_class=HTMLResponse)
def sign_up_submit(
    request: Request,
    first_name: str = Form(""),
    last_name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        _, session = sign_up(db, email, password, first_name, last_name)
    except AuthenticationError as e:
        return templates.TemplateResponse(
            request,
            "sign_up.html",
            {
                "error": str(e),
                "form": {"first_name": first_name, "last_name": last_name, "email": email},
            },
            status_code=400,
        )
    return _signed_in_redirect(session, settings)


# -------------------------------------------------------------------
# Logout
# -------------------------------------------------------------------

@router.post("/logout")
def logout_submit(
    secret: Optional[str] = Depends(get_session_secret),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    logout(db, secret)
    response = RedirectResponse(url="/sign-in", status_code=303)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response
