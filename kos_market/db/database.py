import ssl

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from kos_market.core.config import config

# managed Postgres only accepts TLS connections
connect_args = {"ssl": ssl.create_default_context()} if config.is_production else {}

engine = create_async_engine(
    config.database_url,
    echo=config.sql_echo,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# lifecycle results are built from rows after commit
async_session = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db():
    """Creates the users, contents and listings tables when missing."""
    import kos_market.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
