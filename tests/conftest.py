import os

# Settings are read at import time; point them at an in-memory database
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from school_billing.core.db import get_db
from school_billing.main import create_app
from school_billing.models import Base, FeeStructure, FeeType, SchoolClass, Student


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


class Seeder:
    """Writes the rows the billing core expects other modules to own"""

    def __init__(self, db):
        self.db = db

    def school_class(self, name: str) -> SchoolClass:
        row = SchoolClass(class_name=name)
        self.db.add(row)
        self.db.commit()
        return row

    def student(self, class_id, first_name: str, last_name: str = "") -> Student:
        row = Student(class_id=class_id, first_name=first_name, last_name=last_name)
        self.db.add(row)
        self.db.commit()
        return row

    def fee_type(self, name: str) -> FeeType:
        row = FeeType(name=name)
        self.db.add(row)
        self.db.commit()
        return row

    def structure(self, class_id, fee_type_id, amount, frequency="monthly", academic_year="2024-2025") -> FeeStructure:
        row = FeeStructure(
            class_id=class_id,
            fee_type_id=fee_type_id,
            amount=Decimal(amount),
            frequency=frequency,
            academic_year=academic_year,
        )
        self.db.add(row)
        self.db.commit()
        return row


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def monthly_setup(seed):
    """Class with two students, tuition 5000 and library 200 billed monthly in 2024-2025"""
    klass = seed.school_class("Grade 1")
    alice = seed.student(klass.id, "Alice", "Wanjiru")
    brian = seed.student(klass.id, "Brian", "Otieno")
    tuition = seed.fee_type("tuition")
    library = seed.fee_type("library")
    seed.structure(klass.id, tuition.id, "5000.00")
    seed.structure(klass.id, library.id, "200.00")
    return {
        "class_id": klass.id,
        "student_ids": [alice.id, brian.id],
        "tuition_id": tuition.id,
        "library_id": library.id,
    }
