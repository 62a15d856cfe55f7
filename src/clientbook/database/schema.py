from sqlalchemy import Column, Engine, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

SCHEMA_VERSION = 1


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)  # list order key
    email = Column(String, nullable=False)
    external_ref = Column(String, nullable=False)  # legacy id or remote username


def create_all(engine: Engine) -> None:
    Base.metadata.create_all(engine)
