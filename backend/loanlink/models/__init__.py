"""ORM Models — one table per document collection.

Invariants:
    - All models inherit from Base (db/base.py)
    - No foreign keys between collections: relationships are resolved by lookup
      (loan_id, user_email), never by embedding

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from loanlink.models.user import User  # noqa: F401
from loanlink.models.loan import Loan  # noqa: F401
from loanlink.models.application import Application  # noqa: F401
from loanlink.models.notification import Notification  # noqa: F401
