from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.api import deps
from app.crud import user
from app.schemas.user import UserCreate, UserLogin, UserResponse, Token
from app.models.user import User
from app.core.security import create_access_token
from app.core.config import settings

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    *,
    db: Session = Depends(deps.get_db),
    user_in: UserCreate,
):
    """
    Registrar un nuevo comprador.

    Las cuentas de administrador no se crean por esta vía (ver `init_db.py`).

    Args:
        `db`: Sesión de base de datos
        `user_in`: Datos del usuario a crear

    Returns:
        `UserResponse`: Usuario creado

    Raises:
        `HTTPException`: 400 si ya existe un usuario con el mismo email
    """
    existing_user = user.get_by_email(db, email=user_in.email)
    if existing_user:
        raise HTTPException(
            status_code=400,
            detail="Ya existe un usuario con este email en el sistema.",
        )

    return user.create(db, obj_in=user_in)


@router.post("/login", response_model=Token)
def login_for_access_token(
    *,
    db: Session = Depends(deps.get_db),
    user_in: UserLogin,
):
    """
    Iniciar sesión y obtener token de acceso JWT.

    Raises:
        `HTTPException`: 401 si las credenciales son incorrectas
    """
    authenticated_user = user.authenticate(
        db, email=user_in.email, password=user_in.password
    )
    if not authenticated_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email o contraseña incorrectos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        authenticated_user.email,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        extra_claims={"role": authenticated_user.role},
    )
    return Token(access_token=access_token, token_type="bearer")


@router.get("/me", response_model=UserResponse)
def read_user_me(
    current_user: User = Depends(deps.get_current_user),
):
    """
    Obtener información del usuario autenticado actual.
    """
    return current_user
