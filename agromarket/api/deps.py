from typing import Generator, Optional
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from agromarket.core.config import Settings
from agromarket.core.guard import require_authentication, require_role
from agromarket.core.security import decode_identity
from agromarket.models.user import Role
from agromarket.schemas.user import Identity


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_identity(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    """
    Identidad del llamador, o None si es anónimo.

    Nunca falla: un token ausente o inválido deja al llamador como anónimo y
    cada operación decide si lo acepta.
    """
    return decode_identity(
        authorization, secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )


def get_current_identity(
    identity: Optional[Identity] = Depends(get_identity),
) -> Identity:
    return require_authentication(identity)


def get_current_farmer(
    identity: Optional[Identity] = Depends(get_identity),
) -> Identity:
    return require_role(identity, Role.FARMER)
