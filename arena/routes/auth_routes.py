import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from supabase import AsyncClient

from arena.api.dependencies import get_anonymous_db, get_session_events, get_settings
from arena.core import security
from arena.core.config import Settings
from arena.core.events import SessionEvent, SessionEvents
from arena.schemas.user_schemas import LoginForm, RegisterForm
from arena.services import auth_service, user_service
from arena.routes.common import flash, form_errors, render

logger = logging.getLogger(__name__)

router = APIRouter()

LOGIN_ERRORS = {
    "auth_callback_error": "Could not complete sign in from the email link. Please sign in again.",
    "unknown_error": "Something went wrong while signing you in.",
}


@router.get("/login", summary="Sign in page")
async def login_page(request: Request, error: Optional[str] = None):
    return render(request, "login.html", {"error": LOGIN_ERRORS.get(error), "form": {}, "errors": {}})


@router.post("/login", summary="Sign in with email and password")
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: AsyncClient = Depends(get_anonymous_db),
    session_events: SessionEvents = Depends(get_session_events),
):
    form = {"email": email}
    try:
        credentials = LoginForm(email=email, password=password)
    except ValidationError as e:
        return render(request, "login.html", {"form": form, "errors": form_errors(e)}, status_code=422)

    result = await auth_service.sign_in(db, credentials.email, credentials.password)
    if result.error is not None:
        # The auth service message is shown as is ("Invalid login credentials", ...)
        return render(request, "login.html", {"form": form, "errors": {}, "error": result.error.message}, status_code=400)

    security.store_session(request.session, result.data)
    session_events.emit(
        SessionEvent.SIGNED_IN, result.data.user.id, session_id=security.token_session_id(result.data.access_token)
    )
    return RedirectResponse(url="/tournaments", status_code=303)


@router.get("/register", summary="Registration page")
async def register_page(request: Request):
    return render(request, "register.html", {"form": {}, "errors": {}})


@router.post("/register", summary="Create an account")
async def register(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: AsyncClient = Depends(get_anonymous_db),
    settings: Settings = Depends(get_settings),
):
    """
    Validates the form, refuses emails that already have a profile, then signs
    the user up. The account is usable once the emailed link has been followed,
    which lands on `/auth/callback`.
    """
    form = {"username": username, "email": email}
    try:
        data = RegisterForm(username=username, email=email, password=password)
    except ValidationError as e:
        return render(request, "register.html", {"form": form, "errors": form_errors(e)}, status_code=422)

    existing = await user_service.email_registered(db, data.email)
    if existing.error is None and existing.data:
        return render(request, "register.html", {"form": form, "errors": {"email": "This email is already registered"}}, status_code=400)

    result = await auth_service.sign_up(
        db, data.email, data.password, data.username,
        redirect_to=f"{settings.SITE_URL.rstrip('/')}/auth/callback",
    )
    if result.error is not None:
        return render(request, "register.html", {"form": form, "errors": {}, "error": result.error.message}, status_code=400)

    flash(request, "Registration successful! Please check your email to verify your account.", "success")
    return RedirectResponse(url="/auth/login", status_code=303)


@router.get("/callback", summary="Exchange an email-link code for a session")
async def auth_callback(
    request: Request,
    code: Optional[str] = None,
    db: AsyncClient = Depends(get_anonymous_db),
    session_events: SessionEvents = Depends(get_session_events),
):
    if not code:
        return RedirectResponse(url="/auth/login", status_code=303)

    try:
        result = await auth_service.exchange_code_for_session(db, code)
        if result.error is not None:
            return RedirectResponse(url="/auth/login?error=auth_callback_error", status_code=303)

        security.store_session(request.session, result.data)
        session_events.emit(
            SessionEvent.SIGNED_IN, result.data.user.id, session_id=security.token_session_id(result.data.access_token)
        )
        return RedirectResponse(url="/dashboard", status_code=303)
    except Exception:
        logger.exception("Auth callback failed")
        return RedirectResponse(url="/auth/login?error=unknown_error", status_code=303)


@router.post("/logout", summary="Sign out")
async def logout(
    request: Request,
    db: AsyncClient = Depends(get_anonymous_db),
    session_events: SessionEvents = Depends(get_session_events),
):
    tokens = security.read_session_tokens(request.session)
    user_id = request.session.get(security.USER_ID_KEY)
    session_id = security.token_session_id(tokens[0]) if tokens else None
    if tokens is not None:
        result = await auth_service.sign_out(db, *tokens)
        if result.error is not None:
            # The cookie is dropped regardless; the token simply expires server side
            logger.warning("Remote sign out failed for %s: %s", user_id, result.error)

    security.clear_session(request.session)
    session_events.emit(SessionEvent.SIGNED_OUT, user_id, session_id=session_id)
    flash(request, "Successfully signed out!", "success")
    return RedirectResponse(url="/auth/login", status_code=303)
