"""数据库会话管理。"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from mta_api.core.config import get_settings

settings = get_settings()


def _connect_args(database_url: str) -> dict[str, object]:
    """PostgreSQL 下为每个连接设置语句超时，超时语句所在事务会被整体回滚。"""
    if database_url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={settings.database_statement_timeout_ms}"}
    return {}


# 全局数据库引擎，开启连接预检查以减少僵尸连接影响。
engine = create_engine(
    settings.database_url,
    future=True,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)
# 统一会话工厂，路由层通过依赖注入获取短生命周期会话。
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """为每个请求提供独立数据库会话。"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """在一个事务内执行写操作：成功提交，任何异常回滚后继续抛出。"""
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise
