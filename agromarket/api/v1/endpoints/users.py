from datetime import timedelta
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from agromarket.api import deps
from agromarket.core.config import Settings
from agromarket.core.database import MAX_INTEGER
from agromarket.core.errors import AlreadyExists, NotAuthenticated, NotFound
from agromarket.core.security import create_identity_token
from agromarket.crud import user
from agromarket.schemas.user import AuthPayload, Identity, UserCreate, UserLogin, UserResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_payload(db_user, settings: Settings) -> AuthPayload:
    token = create_identity_token(
        db_user,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return AuthPayload(token=token, user=db_user)


@router.post("/signup", response_model=AuthPayload, status_code=status.HTTP_201_CREATED)
def signup(
    *,
    db: Session = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_settings),
    user_in: UserCreate,
):
    """
    Registrar un nuevo usuario y devolver su token de acceso.

    Args:
        `user_in`: Nombre, email, contraseña y rol (`farmer` o `buyer`, por defecto `buyer`)

    Returns:
        `AuthPayload`: Token JWT y datos del usuario creado

    Raises:
        `AlreadyExists`: 409 si el email ya está registrado
    """
    if user.get_by_email(db, email=user_in.email):
        raise AlreadyExists("Email already registered")

    created_user = user.create(db, obj_in=user_in)
    logger.info(f"User {created_user.id} registered as {created_user.role.value}")
    return _auth_payload(created_user, settings)


@router.post("/login", response_model=AuthPayload)
def login(
    *,
    db: Session = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_settings),
    user_in: UserLogin,
):
    """
    Iniciar sesión y obtener token de acceso JWT.

    Raises:
        `NotAuthenticated`: 401 si las credenciales son incorrectas
    """
    authenticated_user = user.authenticate(db, email=user_in.email, password=user_in.password)
    if not authenticated_user:
        logger.warning(f"Failed login for {user_in.email}")
        raise NotAuthenticated("Incorrect email or password")
    return _auth_payload(authenticated_user, settings)


@router.post("/logout")
def logout(current: Identity = Depends(deps.get_current_identity)):
    """
    Tokens are stateless; the client discards its copy.
    """
    return {"success": True}


@router.get("/me", response_model=UserResponse)
def read_user_me(
    db: Session = Depends(deps.get_db),
    current: Identity = Depends(deps.get_current_identity),
):
    db_user = user.get(db, id=current.id)
    if not db_user:
        raise NotFound("user", current.id)
    return db_user


@router.get("/{user_id}", response_model=UserResponse)
def read_user(
    user_id: int = Path(..., ge=1, le=MAX_INTEGER),
    db: Session = Depends(deps.get_db),
    current: Identity = Depends(deps.get_current_identity),
):
    """
    Obtener un usuario específico por su ID.

    Raises:
        `NotFound`: 404 si el usuario no existe
    """
    db_user = user.get(db, id=user_id)
    if not db_user:
        raise NotFound("user", user_id)
    return db_user
