from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from authsome_otp.database import SessionLocal, session_scope
from authsome_otp.models.schema.db_config import Databases


def _conditions(model, filters: dict) -> list:
    conditions = []
    for field, value in filters.items():
        if not hasattr(model, field):
            raise ValueError(f"{model.__name__} has no column '{field}'")
        column = getattr(model, field)
        # A tuple is a comparison, e.g. ("<", 1700000000)
        if isinstance(value, tuple):
            operator, condition_value = value
            if operator == "<":
                conditions.append(column < condition_value)
            else:
                raise ValueError(f"Unsupported operator '{operator}'")
        elif value is None:
            conditions.append(column.is_(None))
        else:
            conditions.append(column == value)
    return conditions


def _add_record(db: str, *, factory: sessionmaker = SessionLocal, **kwargs):
    model = getattr(Databases, db)
    instance = model(**kwargs)
    with session_scope(factory) as session:
        session.add(instance)
        session.flush()
    return instance


def _select_one_or_none(
    db: str, *, factory: sessionmaker = SessionLocal, order_by="id", **kwargs
):
    model = getattr(Databases, db)
    stmt = (
        select(model)
        .where(*_conditions(model, kwargs))
        .order_by(getattr(model, order_by))
        .limit(1)
    )
    with session_scope(factory) as session:
        return session.execute(stmt).scalars().first()


def _select_records(
    db: str, *, factory: sessionmaker = SessionLocal, order_by=None, descending=False, **kwargs
):
    model = getattr(Databases, db)
    stmt = select(model).where(*_conditions(model, kwargs))
    if order_by is not None:
        column = getattr(model, order_by)
        stmt = stmt.order_by(column.desc() if descending else column)
    with session_scope(factory) as session:
        return session.execute(stmt).scalars().all()


def _delete_records(db: str, *, factory: sessionmaker = SessionLocal, **kwargs) -> int:
    model = getattr(Databases, db)
    with session_scope(factory) as session:
        result = session.execute(delete(model).where(*_conditions(model, kwargs)))
        return result.rowcount


def _delete_expired_record_(db: str, before: int, *, factory: sessionmaker = SessionLocal) -> int:
    return _delete_records(db, factory=factory, expires_at=("<", before))
