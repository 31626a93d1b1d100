"""Seed default classes, subjects, exams and sample students."""
from markshare import models  # noqa: F401
from markshare.core.database import SessionLocal
from markshare.services.seed import SeedService

with SessionLocal() as session:
    result = SeedService(session).seed_initial_data()
    if result.success:
        session.commit()
    print(result.message)
    for key, value in result.details.items():
        print(f"  {key}: {value}")
