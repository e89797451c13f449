"""
Account repository for the Book Lending Tracker.

Accounts and profiles are provisioned by an external identity system; this
repository only registers them and resolves them for display. It does not
store or check credentials.
"""

import logging
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from ..database.schema import Account as AccountDB
from ..database.schema import Profile as ProfileDB
from ..database.session import DatabaseManager, get_db_manager, safe_query
from ..models.account import Account as AccountModel
from ..models.account import AccountCreateSchema
from .repository import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class AccountRepository:
    """Registers and resolves accounts with their profiles."""

    def __init__(self, db_manager: DatabaseManager | None = None):
        self.db = db_manager or get_db_manager()

    def create_account(self, data: AccountCreateSchema, account_id: UUID | None = None) -> AccountModel:
        """
        Create a profile and an account in one transaction.

        Raises:
            DuplicateError: If the login is already taken
        """
        with self.db.session_scope() as session:
            exists = safe_query(
                session,
                lambda s: s.execute(select(AccountDB.id).where(AccountDB.login == data.login)).first(),
                "Failed to check login availability",
            )
            if exists is not None:
                raise DuplicateError(f"Login {data.login!r} is already taken")

            profile = ProfileDB(
                id=uuid4(),
                email=data.email,
                first_name=data.first_name,
                last_name=data.last_name,
            )
            account = AccountDB(id=account_id or uuid4(), login=data.login, profile=profile)
            session.add_all([profile, account])
            try:
                session.flush()
            except IntegrityError as e:
                raise DuplicateError(f"Account already exists: {e!s}") from e

            logger.info("Created account %s (%s)", account.id, account.login)
            return self._to_model(account)

    def get_account(self, account_id: UUID) -> AccountModel | None:
        """Get an account with its profile details, or None if missing."""
        query = select(AccountDB).where(AccountDB.id == account_id).options(joinedload(AccountDB.profile))
        with self.db.session_scope() as session:
            account = safe_query(
                session,
                lambda s: s.execute(query).unique().scalar_one_or_none(),
                "Failed to get account",
            )
            return None if account is None else self._to_model(account)

    def get_by_login(self, login: str) -> AccountModel:
        """
        Get an account by login.

        Raises:
            NotFoundError: If no account has this login
        """
        query = select(AccountDB).where(AccountDB.login == login).options(joinedload(AccountDB.profile))
        with self.db.session_scope() as session:
            account = safe_query(
                session,
                lambda s: s.execute(query).unique().scalar_one_or_none(),
                "Failed to get account by login",
            )
            if account is None:
                raise NotFoundError(f"Account {login!r} not found")
            return self._to_model(account)

    def _to_model(self, account: AccountDB) -> AccountModel:
        profile = account.profile
        return AccountModel(
            id=account.id,
            login=account.login,
            email=profile.email if profile else None,
            first_name=profile.first_name if profile else None,
            last_name=profile.last_name if profile else None,
        )
