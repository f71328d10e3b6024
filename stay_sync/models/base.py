from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All ledger tables inherit from this base so a single metadata object can
    create the whole schema.
    """

    pass
