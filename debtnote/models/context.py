import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Who is writing, and for which branch.

    Passed explicitly into every service function that inserts or updates a
    row. Authentication happens upstream; this only carries its outcome.
    """
    user_id: uuid.UUID
    branch_id: uuid.UUID | None = None
