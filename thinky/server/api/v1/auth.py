"""
Authentication Endpoints.

Registration with e-mailed verification links, password reset, cookie
session login/logout and the caller's own profile (including the avatar
upload).
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from thinky.core.database import as_utc, utc_now
from thinky.core.database.entities.users import User
from thinky.core.database.repositories import SqlRepoBundle
from thinky.core.logging_config import get_logger
from thinky.core.models import to_iso
from thinky.core.models.io import (
    EmailRequest,
    LoginRequest,
    PasswordResetRequest,
    ProfileUpdate,
    RegisterRequest,
    UserProfile,
    UserSummary,
)
from thinky.server.core import constant
from thinky.server.core.config import settings
from thinky.server.services.deps import CurrentUser, RepoDep, clear_session, start_session
from thinky.server.services.mailer import EmailService, get_email_service, render_verification_page
from thinky.server.services.rate_limiter import enforce_auth_rate_limit, login_attempts
from thinky.server.services.security import (
    WEAK,
    evaluate_password_strength,
    generate_token,
    hash_password,
    is_active,
    is_permanent,
    verify_password,
)
from thinky.server.services.storage import AvatarStorage, StorageError, get_storage

logger = get_logger(__name__)

router = APIRouter()

AUTH_LIMITED = [Depends(enforce_auth_rate_limit)]
ALLOWED_AVATAR_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")


def _base_url(request: Request) -> str:
    return (settings.base_url or str(request.base_url)).rstrip("/")


def _verify_link(request: Request, token: str) -> str:
    return f"{_base_url(request)}{constant.API_PREFIX}/auth/verify?token={quote(token)}"


async def _verification_token(repos: SqlRepoBundle, email: str, user_id: Optional[str]) -> str:
    """Reuse the live verification token for ``email`` or issue a new one."""
    active = await repos.verifications.find_active_by_email(email)
    if active is not None:
        return active.token
    token = generate_token()
    await repos.verifications.issue(email, token, constant.EMAIL_VERIFICATION_TTL_MINUTES, user_id=user_id)
    return token


@router.post(
    "/register",
    summary="Register",
    description="Create an unverified account and e-mail a verification link.",
    response_description="Confirmation message.",
    responses={
        202: {"description": "Account stored but the e-mail could not be sent"},
        400: {"description": "Missing fields, weak password or account already exists"},
    },
    dependencies=AUTH_LIMITED,
)
async def register(
    body: RegisterRequest,
    request: Request,
    repos: RepoDep,
    mailer: EmailService = Depends(get_email_service),
):
    """
    Register a new account.

    The account stays unverified until the e-mailed link is followed.
    Registering again with the details of an unverified account re-sends the
    link instead of creating a second account.
    """
    if not body.email or not body.username or not body.password:
        raise HTTPException(status_code=400, detail="All fields are required")
    if len(body.password) < constant.MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    email = body.email.strip().lower()
    username = body.username.strip()
    existing = await repos.users.find_by_email_or_username(email, username)

    if evaluate_password_strength(body.password) == WEAK:
        raise HTTPException(
            status_code=400, detail="Password is too weak. Use a longer password with numbers and symbols."
        )

    if existing is not None:
        if existing.is_verified or existing.email != email:
            raise HTTPException(status_code=400, detail="Email or username already exists")
        user = existing
    else:
        user = await repos.users.create(
            User(email=email, username=username, password_hash=hash_password(body.password), is_verified=False)
        )
        logger.info(f"Registered user {user.id} ({username})")

    token = await _verification_token(repos, email, user.id)
    sent = await mailer.send(
        to=email,
        subject=f"Verify your {constant.BRAND_NAME} account",
        template="verification",
        variables={"link": _verify_link(request, token), "username": username},
    )
    if not sent.ok:
        logger.warning(f"Verification token stored but email send failed: {sent.error or sent.info}")
        return JSONResponse(
            status_code=202,
            content={
                "message": "Verification code stored but failed to send email. Check server logs or contact support."
            },
        )
    return {"message": "Verification link sent to email. Click the link to verify your account."}


@router.post(
    "/register-verify",
    summary="Verify Registration Code",
    description="Code based verification was replaced by e-mailed links.",
    responses={410: {"description": "Always; use the verification link"}},
    dependencies=AUTH_LIMITED,
)
async def register_verify():
    raise HTTPException(status_code=410, detail="Verification-by-code removed. Use the email verification link.")


@router.get(
    "/verify",
    summary="Follow Verification Link",
    description="Verify the account behind a link token, log the user in and redirect to the dashboard.",
    response_class=HTMLResponse,
    responses={303: {"description": "Verified; redirect to the dashboard"}, 400: {"description": "Invalid link"}},
)
async def verify(
    request: Request,
    repos: RepoDep,
    token: Optional[str] = None,
    mailer: EmailService = Depends(get_email_service),
):
    """
    Verify an e-mail address.

    Expired links are removed; an unverified user automatically gets a new
    link and a page explaining that it was sent.
    """
    if not token:
        return HTMLResponse("<h3>Invalid verification link.</h3>", status_code=400)

    row = await repos.verifications.find_by_token(token)
    if row is None:
        return HTMLResponse(
            "<h3>Invalid or expired verification link.</h3>"
            "<p>Please request a new verification email from your account page or during login.</p>",
            status_code=400,
        )

    if as_utc(row.expires_at) < utc_now():
        await repos.verifications.delete_by_token(token)
        user = await repos.users.get_by_email(row.email)
        if user is not None and not user.is_verified:
            new_token = generate_token()
            await repos.verifications.issue(
                row.email, new_token, constant.EMAIL_VERIFICATION_TTL_MINUTES, user_id=user.id
            )
            sent = await mailer.send(
                to=row.email,
                subject="Your new verification link",
                template="verification",
                variables={"link": _verify_link(request, new_token), "username": user.username},
            )
            if not sent.ok:
                logger.warning(f"New verification link stored but email send failed: {sent.error or sent.info}")
            return HTMLResponse(
                render_verification_page(
                    title="Verification Link Expired",
                    message="A new verification link has been sent to your email.",
                    cta_text="Back to Home",
                    cta_href="/",
                )
            )
        return HTMLResponse(
            render_verification_page(
                title="Verification Link Expired",
                message="Please request a new verification email from your account page or try resending during login.",
                cta_text="Request New Link",
                cta_href="/login",
            )
        )

    user = await repos.users.get_by_email(row.email)
    if user is None:
        return HTMLResponse("<h3>User not found.</h3>", status_code=400)

    target = "/dashboard"
    if not user.is_verified:
        user.is_verified = True
        user = await repos.users.update(user)
        target = "/dashboard?verified=1"
        logger.info(f"User {user.id} verified their e-mail")
    await repos.verifications.delete_by_token(token)

    start_session(request, user)
    return RedirectResponse(url=target, status_code=303)


@router.post(
    "/resend-verification",
    summary="Resend Verification",
    description="Send the verification link again to an unverified account.",
    responses={
        202: {"description": "Token stored but e-mail delivery failed"},
        400: {"description": "Missing e-mail or account already verified"},
        404: {"description": "Unknown account"},
    },
    dependencies=AUTH_LIMITED,
)
async def resend_verification(
    body: EmailRequest,
    request: Request,
    repos: RepoDep,
    mailer: EmailService = Depends(get_email_service),
):
    if not body.email:
        raise HTTPException(status_code=400, detail="Email required")
    email = body.email.strip().lower()
    user = await repos.users.get_by_email(email)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user.is_verified:
        raise HTTPException(status_code=400, detail="Account already verified")

    token = await _verification_token(repos, email, user.id)
    sent = await mailer.send(
        to=email,
        subject="Your verification link",
        template="verification",
        variables={"link": _verify_link(request, token), "username": user.username},
    )
    if not sent.ok:
        logger.warning(f"Resend attempted but email send failed: {sent.error or sent.info}")
        return JSONResponse(status_code=202, content={"message": "Verification link stored but failed to send email."})
    return {"message": "Verification email resent"}


@router.post(
    "/forgot-password",
    summary="Request Password Reset",
    description="E-mail a password reset link. The answer is the same whether or not the account exists.",
    responses={202: {"description": "Token stored but e-mail delivery failed"}},
    dependencies=AUTH_LIMITED,
)
async def forgot_password(
    body: EmailRequest,
    request: Request,
    repos: RepoDep,
    mailer: EmailService = Depends(get_email_service),
):
    generic = {"message": "If an account exists, a reset link has been sent to that email."}
    if not body.email:
        raise HTTPException(status_code=400, detail="Email required")
    email = body.email.strip().lower()
    user = await repos.users.get_by_email(email)
    if user is None:
        return generic

    token = generate_token()
    await repos.password_resets.issue(email, token, constant.PASSWORD_RESET_TTL_MINUTES, user_id=user.id)
    sent = await mailer.send(
        to=email,
        subject=f"Reset your {constant.BRAND_NAME} password",
        template="password_reset",
        variables={"link": f"{_base_url(request)}/auth/reset.html?token={quote(token)}", "username": user.username},
    )
    if not sent.ok:
        logger.warning(f"Password reset stored but email send failed: {sent.error or sent.info}")
        return JSONResponse(
            status_code=202,
            content={"message": "If an account exists, a reset link has been stored. Email delivery failed."},
        )
    return generic


@router.post(
    "/reset",
    summary="Reset Password",
    description="Set a new password using a reset token.",
    responses={400: {"description": "Missing fields, bad token or weak password"}},
    dependencies=AUTH_LIMITED,
)
async def reset_password(body: PasswordResetRequest, repos: RepoDep):
    if not body.token or not body.password:
        raise HTTPException(status_code=400, detail="Token and new password required")

    row = await repos.password_resets.find_active_by_token(body.token)
    if row is None:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    user = await repos.users.get_by_email(row.email)
    if user is None:
        raise HTTPException(status_code=400, detail="User not found")
    if evaluate_password_strength(body.password) == WEAK:
        raise HTTPException(status_code=400, detail="Password is too weak")

    user.password_hash = hash_password(body.password)
    await repos.users.update(user)
    await repos.password_resets.delete_by_email(row.email)
    logger.info(f"Password reset for user {user.id}")
    return {"message": "Password has been reset successfully"}


@router.post(
    "/login",
    summary="Log In",
    description="Start a cookie session for a verified, non-banned account.",
    responses={
        401: {"description": "Invalid credentials"},
        403: {"description": "Unverified or banned account"},
        429: {"description": "Too many attempts"},
    },
    dependencies=AUTH_LIMITED,
)
async def login(body: LoginRequest, request: Request, repos: RepoDep):
    """
    Log in with e-mail and password.

    Failed attempts are counted per e-mail address; too many lock the address
    for a while. In single-session mode a new login invalidates the user's
    other sessions.
    """
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    ident = body.email.strip().lower()
    if login_attempts.retry_after(ident) > 0:
        minutes = login_attempts.retry_after_minutes(ident)
        raise HTTPException(status_code=429, detail=f"Too many login attempts. Try again in {minutes} minute(s).")

    user = await repos.users.get_by_email(ident)
    if user is None:
        login_attempts.record_failure(ident)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_verified:
        raise HTTPException(
            status_code=403, detail="Account not verified. Check your email for the verification link."
        )
    if not verify_password(user.password_hash, body.password):
        login_attempts.record_failure(ident)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    login_attempts.clear(ident)

    if is_active(user.banned_until):
        if is_permanent(user.banned_until):
            raise HTTPException(
                status_code=403, detail="Your account has been permanently banned and cannot log in."
            )
        until = to_iso(user.banned_until)
        raise HTTPException(
            status_code=403,
            detail={"error": f"Your account is banned until {until}.", "banned_until": until},
        )

    if settings.single_session_per_user:
        user.session_token = generate_token()
        user = await repos.users.update(user)
    start_session(request, user)
    await repos.online_users.touch(user.id, user.username)

    logger.info(f"User {user.id} logged in")
    return {"message": "Login successful", "user": UserSummary.model_validate(user).model_dump()}


@router.post(
    "/logout",
    summary="Log Out",
    description="End the current session and drop the user from the online list.",
)
async def logout(request: Request, user: CurrentUser, repos: RepoDep):
    await repos.online_users.remove(user.id)
    clear_session(request)
    return {"message": "Logout successful"}


@router.get(
    "/me",
    summary="Current User",
    description="Return the logged-in user's own profile.",
    responses={401: {"description": "Not logged in"}},
)
async def me(user: CurrentUser):
    return {"user": UserProfile.model_validate(user).model_dump(mode="json")}


@router.put(
    "/me",
    summary="Update Profile",
    description="Change the caller's username and/or display name.",
    responses={400: {"description": "Username already taken"}},
)
async def update_me(body: ProfileUpdate, request: Request, user: CurrentUser, repos: RepoDep):
    username = (body.username or "").strip()
    if username and username != user.username:
        taken = await repos.users.get_by_username(username)
        if taken is not None and taken.id != user.id:
            raise HTTPException(status_code=400, detail="Username already taken")
        user.username = username
    if body.display_name is not None:
        user.display_name = body.display_name
    user = await repos.users.update(user)
    request.session["username"] = user.username
    return {"user": UserProfile.model_validate(user).model_dump(mode="json")}


@router.post(
    "/me/avatar",
    summary="Upload Avatar",
    description="Upload a profile picture (multipart field ``avatar``, images only, at most 2 MiB).",
    responses={
        400: {"description": "No file or not an image"},
        413: {"description": "File too large"},
        500: {"description": "Storage failure"},
    },
)
async def upload_avatar(
    user: CurrentUser,
    repos: RepoDep,
    avatar: Optional[UploadFile] = File(None),
    storage: AvatarStorage = Depends(get_storage),
):
    """
    Replace the caller's avatar.

    The previous picture is removed from storage afterwards on a best-effort
    basis.
    """
    if avatar is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if (avatar.content_type or "") not in ALLOWED_AVATAR_TYPES:
        raise HTTPException(status_code=400, detail="Only image files are allowed")
    content = await avatar.read()
    if len(content) > settings.avatar_max_bytes:
        raise HTTPException(status_code=413, detail="File too large")

    old_url = user.profile_picture_url
    try:
        url = await storage.save(user.id, avatar.filename, content, avatar.content_type)
    except StorageError as e:
        logger.error(f"Avatar upload failed for user {user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to upload avatar to storage") from e

    user.profile_picture_url = url
    user = await repos.users.update(user)
    if old_url and old_url != url:
        await storage.delete_by_url(old_url)
    return {"user": UserProfile.model_validate(user).model_dump(mode="json")}
