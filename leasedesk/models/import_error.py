"""Import error ledger document model."""

from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field

from leasedesk.models.timestamps import utc_now


class ImportRowError(Document):
    """A rejected field or row-level failure recorded during an import.

    ``row_number`` is 1-based with the header on row 1; row 0 marks a
    failure that is not tied to any row.
    """

    import_batch_id: Indexed(str)
    row_number: int
    field: Optional[str] = None
    message: str
    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "import_errors"
