from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from farm_catalog.config import settings

# SQLAlchemy engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Check connections before use
    echo=False
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for the models
Base = declarative_base()

