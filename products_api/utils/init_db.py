"""One-time database initialization script."""

import asyncio

from sqlalchemy import JSON, Boolean, Column, Float, Integer, Numeric, String, Text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import declarative_base

from products_api.utils.config import DATABASE_URL

Base = declarative_base()


class ProductRow(Base):
    """Database model for products table."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    brand = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    colour = Column(String, nullable=True, index=True)
    size = Column(String, nullable=True, index=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0.0)
    on_promotion = Column(Boolean, nullable=False, default=False)
    image_urls = Column(JSON, nullable=False, default=list)


async def init_db():
    """
    Initialize database tables.

    Creates all tables defined in SQLAlchemy models if they don't exist.

    Raises:
        ValueError: If DATABASE_URL is not set
    """
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL must be set")

    engine = create_async_engine(str(DATABASE_URL))
    async with engine.begin() as conn:
        # Creates missing tables only; schema changes need a migration tool.
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    print("Database tables initialized (if they did not already exist).")


if __name__ == "__main__":
    asyncio.run(init_db())
