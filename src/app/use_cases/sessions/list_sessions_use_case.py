from typing import List

from src.app.services.session_store import ActiveSessionInfo, SessionInfo, SessionStore
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return


class ListSessionsUseCase:
    """Read-only views of live sessions, for their owner or for administrators"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def for_user(self, user_id: int) -> Result[List[SessionInfo]]:
        return Return.ok(await SessionStore(self.uow).list_active_for_user(user_id))

    async def all_active(self) -> Result[List[ActiveSessionInfo]]:
        return Return.ok(await SessionStore(self.uow).list_active())
