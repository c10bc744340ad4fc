from sqlmodel import SQLModel, create_engine, Session
from projmeta.core.config import settings

# Global tunnel instance
_tunnel = None
_engine = None


# Handle SSH Tunnel if needed
def get_engine():
    global _tunnel, _engine

    if _engine is not None:
        return _engine

    if settings.USE_SSH:
        from sshtunnel import SSHTunnelForwarder

        if _tunnel is None:
            _tunnel = SSHTunnelForwarder(
                (settings.SSH_HOST, 22),
                ssh_username=settings.SSH_USER,
                ssh_password=settings.SSH_PASSWORD,
                remote_bind_address=(settings.DB_HOST, 3306),
                set_keepalive=60
            )
            _tunnel.start()

        # Connect through the local end of the tunnel
        mysql_url = (
            f"mysql+pymysql://{settings.DB_USER}:{settings.DB_PASSWORD}"
            f"@127.0.0.1:{_tunnel.local_bind_port}/{settings.DB_NAME}"
        )
        _engine = create_engine(mysql_url, pool_pre_ping=True)
        return _engine

    # Fallback to DATABASE_URL or SQLite
    db_url = settings.DATABASE_URL or "sqlite:///./sqlite.db"

    # SQLite fix for multithreading
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}

    _engine = create_engine(db_url, connect_args=connect_args)
    return _engine


engine = get_engine()


def init_db(bind=None):
    """Create any missing tables. Existing tables are left untouched."""
    # Table models must be imported so they register on SQLModel.metadata
    from projmeta import models  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)


def get_db():
    with Session(engine) as session:
        yield session
