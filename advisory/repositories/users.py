"""Data access for user accounts, permissions and the activity log."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import func, or_, select

from advisory.domain.permissions import PermissionType
from advisory.domain.roles import Role
from advisory.models import Permission, UserAccount, UserActivityLog

from .base import BaseRepository


class UserRepository(BaseRepository):
    def get(self, user_id: int) -> UserAccount | None:
        return self._get(UserAccount, user_id)

    def get_by_email(self, email: str) -> UserAccount | None:
        statement = select(UserAccount).where(func.lower(UserAccount.email) == email.strip().lower())
        return self._session.execute(statement).scalars().first()

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def get_many(self, user_ids: Iterable[int]) -> list[UserAccount]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        statement = select(UserAccount).where(UserAccount.id.in_(ids))
        return list(self._session.execute(statement).scalars())

    def _filtered(self, search: str | None):
        statement = select(UserAccount).where(UserAccount.is_deleted.is_(False))
        pattern = self._search_pattern(search)
        if pattern:
            statement = statement.where(
                or_(
                    func.lower(UserAccount.email).like(pattern),
                    func.lower(UserAccount.first_name).like(pattern),
                    func.lower(UserAccount.last_name).like(pattern),
                )
            )
        return statement

    def count_users(self, *, search: str | None = None) -> int:
        return self._count(self._filtered(search))

    def fetch_users(self, *, search: str | None, limit: int, offset: int) -> list[UserAccount]:
        statement = self._filtered(search).order_by(UserAccount.id).limit(limit).offset(offset)
        return list(self._session.execute(statement).scalars())

    def search(self, query: str, *, limit: int = 50) -> list[UserAccount]:
        return self.fetch_users(search=query, limit=limit, offset=0)

    def list_by_role(self, role: Role, *, active_only: bool = True) -> list[UserAccount]:
        statement = select(UserAccount).where(
            UserAccount.role == role, UserAccount.is_deleted.is_(False)
        )
        if active_only:
            statement = statement.where(UserAccount.is_active.is_(True))
        return list(self._session.execute(statement.order_by(UserAccount.id)).scalars())

    def count_by_role(self) -> dict[Role, int]:
        statement = (
            select(UserAccount.role, func.count(UserAccount.id))
            .where(UserAccount.is_deleted.is_(False))
            .group_by(UserAccount.role)
        )
        counts = {role: 0 for role in Role}
        for role, total in self._session.execute(statement):
            counts[role] = int(total)
        return counts

    def count_active(self) -> int:
        return self._count(
            select(UserAccount.id).where(
                UserAccount.is_active.is_(True), UserAccount.is_deleted.is_(False)
            )
        )

    # permissions -------------------------------------------------------

    def all_permissions(self) -> list[Permission]:
        return list(self._session.execute(select(Permission).order_by(Permission.id)).scalars())

    def permissions_by_ids(self, permission_ids: Iterable[int]) -> list[Permission]:
        ids = list(dict.fromkeys(permission_ids))
        if not ids:
            return []
        statement = select(Permission).where(Permission.id.in_(ids))
        return list(self._session.execute(statement).scalars())

    def permissions_for_types(self, types: Iterable[PermissionType]) -> list[Permission]:
        wanted = list(types)
        if not wanted:
            return []
        statement = select(Permission).where(Permission.permission_type.in_(wanted))
        return list(self._session.execute(statement).scalars())

    # activity ----------------------------------------------------------

    def log_activity(
        self,
        account: UserAccount | None,
        action: str,
        details: str | None = None,
        ip_address: str | None = None,
    ) -> UserActivityLog:
        entry = UserActivityLog(
            user_account=account,
            action=action,
            details=details,
            ip_address=ip_address,
        )
        self._session.add(entry)
        return entry

    def recent_activity(self, limit: int) -> Sequence[UserActivityLog]:
        statement = (
            select(UserActivityLog)
            .order_by(UserActivityLog.activity_time.desc(), UserActivityLog.id.desc())
            .limit(limit)
        )
        return list(self._session.execute(statement).scalars())
