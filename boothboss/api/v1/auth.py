"""Account registration and login endpoints."""

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import func, or_, select

from boothboss.core.config import settings
from boothboss.core.deps import CurrentUser, DBSession, get_user_id
from boothboss.core.rate_limit import limiter
from boothboss.core.security import create_access_token, hash_password, verify_password
from boothboss.models.user import User, UserRole
from boothboss.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserResponse

router = APIRouter()


def _issue_token(user: User) -> TokenResponse:
    role = UserRole.ADMIN if user.email.lower() == settings.admin_email.lower() else user.role
    return TokenResponse(
        access_token=create_access_token(str(user.id), user.email, role.value),
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a customer account and return an access token.",
)
@limiter.limit("5/minute")
async def register(
    request: Request,  # noqa: ARG001  # required by slowapi
    data: RegisterRequest,
    db: DBSession,
) -> TokenResponse:
    """Create a new customer account."""
    email = data.email.lower()
    conditions = [func.lower(User.email) == email]
    if data.username:
        conditions.append(User.username == data.username)
    existing = (await db.execute(select(User).where(or_(*conditions)))).scalars().first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email or username already exists",
        )

    user = User(
        email=email,
        name=data.name,
        username=data.username,
        password_hash=hash_password(data.password),
        organization_name=data.organization_name,
        role=UserRole.CUSTOMER,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    return _issue_token(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description="Exchange email and password for an access token.",
)
@limiter.limit("10/minute")
async def login(
    request: Request,  # noqa: ARG001  # required by slowapi
    data: LoginRequest,
    db: DBSession,
) -> TokenResponse:
    """Authenticate with email and password."""
    user = (
        await db.execute(select(User).where(func.lower(User.email) == data.email.lower()))
    ).scalar_one_or_none()

    if user is None or not verify_password(data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    return _issue_token(user)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
)
async def me(user: CurrentUser, db: DBSession) -> UserResponse:
    """Return the authenticated account."""
    account = await db.get(User, get_user_id(user))
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(account)
