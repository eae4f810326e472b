from agromarket.schemas.user import Identity


def identity_for(db_user) -> Identity:
    return Identity(id=db_user.id, email=db_user.email, role=db_user.role)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
