"""
Script para inicializar la base de datos y crear todas las tablas.
"""
from agromarket.core.config import settings
from agromarket.core.database import init_db, dispose_db


def main():
    """
    Crea todas las tablas en la base de datos configurada en DATABASE_URL.
    """
    print("Creando tablas en la base de datos...")
    engine, _ = init_db(settings.DATABASE_URL)
    dispose_db(engine)
    print("Tablas creadas exitosamente.")


if __name__ == "__main__":
    main()
