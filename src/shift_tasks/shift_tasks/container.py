from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .auth.service import AuthService
from .auth.tokens import TokenService
from .cards.mysql_card_repository import MySQLCardRecordRepository
from .cards.repository import CardRecordRepository
from .cards.service import CardService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_TOKEN_HOURS
from .database.bootstrap import SchemaBootstrapper
from .database.connection import DBConfig, DatabaseConnection
from .positions.mysql_position_repository import MySQLPositionRepository
from .positions.repository import PositionRepository
from .ranking.service import RankingService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    positions_repo: PositionRepository
    tasks_repo: TaskRepository
    cards_repo: CardRecordRepository

    token_service: TokenService
    auth_service: AuthService
    user_service: UserService
    task_service: TaskService
    card_service: CardService
    ranking_service: RankingService

    bootstrapper: Optional[SchemaBootstrapper] = None
    clock: Callable[[], datetime] = now_local


def build_services(
    *,
    users_repo: UserRepository,
    positions_repo: PositionRepository,
    tasks_repo: TaskRepository,
    cards_repo: CardRecordRepository,
    jwt_secret: str,
    jwt_expires_hours: int = DEFAULT_TOKEN_HOURS,
    bootstrapper: Optional[SchemaBootstrapper] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over any repository implementation (MySQL or in-memory)."""
    token_service = TokenService(jwt_secret, expires_hours=jwt_expires_hours)

    return Container(
        users_repo=users_repo,
        positions_repo=positions_repo,
        tasks_repo=tasks_repo,
        cards_repo=cards_repo,
        token_service=token_service,
        auth_service=AuthService(users_repo, token_service),
        user_service=UserService(users_repo, positions_repo),
        task_service=TaskService(tasks_repo, users_repo, positions_repo),
        card_service=CardService(cards_repo, users_repo, positions_repo),
        ranking_service=RankingService(tasks_repo, users_repo, positions_repo),
        bootstrapper=bootstrapper,
        clock=clock,
    )


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_expires_hours: int = DEFAULT_TOKEN_HOURS,
    admin_email: str,
    admin_password: str,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        positions_repo=MySQLPositionRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        cards_repo=MySQLCardRecordRepository(conn),
        jwt_secret=jwt_secret,
        jwt_expires_hours=jwt_expires_hours,
        bootstrapper=SchemaBootstrapper(conn, admin_email=admin_email, admin_password=admin_password),
    )
