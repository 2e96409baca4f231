"""
Script para inicializar la base de datos y crear la cuenta de administrador.

Las cuentas admin no pueden registrarse por la API; se crean aquí a partir de
ADMIN_EMAIL / ADMIN_PASSWORD.
"""
from app.core.config import settings
from app.core.database import SessionLocal, init_db as create_tables
from app.crud import user
from app.models.user import ROLE_ADMIN
from app.schemas.user import UserCreate


def init_db():
    """
    Crea todas las tablas y, si está configurado, el administrador inicial.
    """
    print("Creando tablas en la base de datos...")
    create_tables()
    print("Tablas creadas exitosamente.")

    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        print("ADMIN_EMAIL/ADMIN_PASSWORD no configurados; no se crea administrador.")
        return

    db = SessionLocal()
    try:
        if user.get_by_email(db, email=settings.ADMIN_EMAIL):
            print(f"El administrador {settings.ADMIN_EMAIL} ya existe.")
            return
        user.create(
            db,
            obj_in=UserCreate(
                email=settings.ADMIN_EMAIL,
                name=settings.ADMIN_NAME,
                password=settings.ADMIN_PASSWORD,
            ),
            role=ROLE_ADMIN,
        )
        print(f"Administrador {settings.ADMIN_EMAIL} creado.")
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
