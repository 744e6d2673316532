import contextlib
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from database.database import Database
from database.repositories import (
    AccountRepository,
    QuotaRepository,
    OpportunityRepository,
    ProfileRepository,
    UnlockRepository,
    ApplicationRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class UnitOfWork:
    """All repositories bound to one Session, i.e. one transaction."""
    session: Session
    accounts: AccountRepository
    quotas: QuotaRepository
    opportunities: OpportunityRepository
    profiles: ProfileRepository
    unlocks: UnlockRepository
    applications: ApplicationRepository

    @classmethod
    def for_session(cls, session: Session) -> "UnitOfWork":
        return cls(
            session=session,
            accounts=AccountRepository(session),
            quotas=QuotaRepository(session),
            opportunities=OpportunityRepository(session),
            profiles=ProfileRepository(session),
            unlocks=UnlockRepository(session),
            applications=ApplicationRepository(session),
        )


@contextlib.contextmanager
def engine_uow(db: Database):
    """Per-unit-of-work transaction scope.

    Yields a UnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with engine_uow(db) as uow:
            ledger.debit(uow, user_id, 5, "unlock:abc")
        # commit happens automatically on successful exit
    """
    session = db.SessionLocal()
    try:
        yield UnitOfWork.for_session(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
