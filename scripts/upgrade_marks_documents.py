"""Check and rewrite marks documents stored with an older entry schema."""
from sqlalchemy import select

from markshare import models  # noqa: F401
from markshare.core.database import SessionLocal
from markshare.core.exceptions import StoredDocumentError
from markshare.models.marks import CURRENT_SCHEMA_VERSION, MarksDocument
from markshare.services.marks import read_entries, write_entries

with SessionLocal() as session:
    documents = session.execute(
        select(MarksDocument)
        .where(MarksDocument.schema_version != CURRENT_SCHEMA_VERSION)
        .with_for_update()
    ).scalars().all()
    print(f"Found {len(documents)} documents below schema version {CURRENT_SCHEMA_VERSION}")

    upgraded = 0
    for document in documents:
        try:
            entries = read_entries(document)
        except StoredDocumentError as e:
            print(f"Skipping document {document.id}: {e.message}")
            continue
        write_entries(document, entries)
        upgraded += 1

    session.commit()
    print(f"Upgraded {upgraded} documents!")
