import os

# 引擎在导入时创建，测试统一使用内存 SQLite，避免依赖外部数据库。
os.environ.setdefault("MTA_DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from mta_api.db.base import Base
from mta_api.models import Menu, MenuAuth, Role, Tenant, User
from mta_api.models.enums import RecordStatus


@pytest.fixture
def db_session() -> Session:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    local_session = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)
    db = local_session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def make_request():
    def _make_request(path: str = "/test", method: str = "GET") -> Request:
        return Request({"type": "http", "method": method, "path": path, "headers": []})

    return _make_request


@pytest.fixture
def make_menu(db_session: Session):
    def _make_menu(
        menu_id: int,
        *,
        parent_id: int = 0,
        sort: int = 0,
        status: str = RecordStatus.ENABLED,
        title: str | None = None,
    ) -> Menu:
        menu = Menu(
            id=menu_id,
            path=f"/menu-{menu_id}",
            name=f"Menu{menu_id}",
            component=f"/views/menu-{menu_id}",
            title=title or f"menu-{menu_id}",
            parent_id=parent_id,
            sort=sort,
            status=status,
            level=1 if parent_id == 0 else 2,
        )
        db_session.add(menu)
        db_session.commit()
        return menu

    return _make_menu


@pytest.fixture
def make_auth(db_session: Session):
    def _make_auth(auth_id: int, menu_id: int, mark: str | None = None) -> MenuAuth:
        auth = MenuAuth(id=auth_id, menu_id=menu_id, mark=mark or f"mark-{auth_id}", title=f"auth-{auth_id}")
        db_session.add(auth)
        db_session.commit()
        return auth

    return _make_auth


@pytest.fixture
def make_identity(db_session: Session):
    """创建租户、角色与绑定该角色的用户。"""

    def _make_identity(tenant_id: int, role_id: int, user_id: int | None = None) -> tuple[Tenant, Role, User | None]:
        tenant = db_session.get(Tenant, tenant_id)
        if tenant is None:
            tenant = Tenant(id=tenant_id, code=f"tenant-{tenant_id}", name=f"Tenant {tenant_id}")
            db_session.add(tenant)
        role = Role(id=role_id, tenant_id=tenant_id, name=f"role-{role_id}")
        db_session.add(role)
        user = None
        if user_id is not None:
            user = User(id=user_id, tenant_id=tenant_id, role_id=role_id, username=f"user-{user_id}")
            db_session.add(user)
        db_session.commit()
        return tenant, role, user

    return _make_identity


@pytest.fixture
def catalog(make_menu, make_auth):
    """标准菜单目录。

    1 系统管理(sort=1)
      2 用户管理(sort=1)  按钮 11 add, 12 edit
      3 角色管理(sort=2)  按钮 13 delete
    4 仪表盘(sort=0)       按钮 14 view
    5 已禁用(sort=2, disabled)
      6 禁用下的子菜单      按钮 15 export
    """
    make_menu(1, sort=1)
    make_menu(2, parent_id=1, sort=1)
    make_menu(3, parent_id=1, sort=2)
    make_menu(4, sort=0)
    make_menu(5, sort=2, status=RecordStatus.DISABLED)
    make_menu(6, parent_id=5, sort=1)
    make_auth(11, 2, "add")
    make_auth(12, 2, "edit")
    make_auth(13, 3, "delete")
    make_auth(14, 4, "view")
    make_auth(15, 6, "export")
