"""
Module: tax_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.  The SQL
    store collaborators of the determination module are selectors.
Architecture position: Kernel > Selectors.  May import from db/.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but MUST
      NOT call session.add(), session.delete(), session.commit(), or
      session.flush().
    - DTO return convention: selectors return frozen dataclasses, NOT raw ORM
      instances.
    - Session ownership: the caller owns the session and its transaction.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Subclasses implement domain-specific read queries against ``self.session``.
    """

    def __init__(self, session: Session):
        self.session = session
