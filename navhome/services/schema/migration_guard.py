"""数据库结构迁移保障.

每个请求前调用 `ensure_schema`,保证目标版本的表、列、索引存在:

- 进程内标记为真时直接返回,不产生任何 I/O;
- 冷启动时读取 KV 中的迁移标记 `schema_migrated_<version>`,存在即视为完成;
- 否则执行幂等的结构变更(建表、补列、建索引、回填冗余分类名),全部成功后写入标记.

多个进程可能同时执行迁移.不使用分布式锁,每条结构语句都先检查再执行,
"列/索引已存在"的错误按成功处理.迁移失败只记录日志,请求继续在现有结构上执行.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import inspect, literal, select, update
from sqlalchemy.exc import SQLAlchemyError

from navhome.services.cache.home_cache_service import CACHE_EXCEPTIONS
from navhome.utils.structlog_config import get_logger, log_error, log_info, log_warning

if TYPE_CHECKING:
    from flask_caching import Cache
    from flask_sqlalchemy import SQLAlchemy
    from sqlalchemy.engine import Connection, Engine

logger = get_logger("schema")

_ALREADY_EXISTS_MARKERS = ("duplicate column", "already exists", "duplicate key name")


class MigrationState:
    """进程级迁移状态.

    生命周期: 进程启动时为 False,首次确认结构就绪后置为 True,此后不再重置.
    """

    def __init__(self) -> None:
        self._migrated = False
        self._lock = threading.Lock()

    @property
    def migrated(self) -> bool:
        return self._migrated

    def mark_migrated(self) -> None:
        with self._lock:
            self._migrated = True


process_migration_state = MigrationState()


@dataclass(frozen=True, slots=True)
class ColumnPatch:
    """可选列: 缺失时通过 ALTER TABLE ADD COLUMN 补齐."""

    table: str
    column: str
    default: object = None


OPTIONAL_COLUMNS: tuple[ColumnPatch, ...] = (
    ColumnPatch("sites", "is_private", default=False),
    ColumnPatch("sites", "category_name"),
    ColumnPatch("pending_sites", "category_name"),
    ColumnPatch("category", "is_private", default=False),
    ColumnPatch("category", "parent_id", default=0),
)


def _is_already_exists(exc: SQLAlchemyError) -> bool:
    message = str(getattr(exc, "orig", None) or exc).lower()
    return any(marker in message for marker in _ALREADY_EXISTS_MARKERS)


class SchemaMigrationGuard:
    """一次性、幂等的结构迁移守卫."""

    def __init__(
        self,
        database: SQLAlchemy,
        cache: Cache | None,
        *,
        marker_key: str,
        state: MigrationState | None = None,
    ) -> None:
        self.database = database
        self.cache = cache
        self.marker_key = marker_key
        self.state = state or process_migration_state

    def ensure_schema(self) -> bool:
        """确保结构就绪,可在每个请求中调用.

        Returns:
            bool: 结构已确认就绪返回 True;迁移失败返回 False(异常已记录,不外抛).

        """
        if self.state.migrated:
            return True

        if self._marker_present():
            self.state.mark_migrated()
            return True

        try:
            added = self.apply_structural_changes()
        except SQLAlchemyError as exc:
            log_error("数据库结构迁移失败,继续使用现有结构", module="schema", exception=exc, marker=self.marker_key)
            return False

        self._write_marker()
        self.state.mark_migrated()
        log_info("数据库结构迁移完成", module="schema", marker=self.marker_key, added_columns=added)
        return True

    def _marker_present(self) -> bool:
        if not self.cache:
            return False
        try:
            return bool(self.cache.get(self.marker_key))
        except CACHE_EXCEPTIONS as exc:
            log_warning("读取迁移标记失败,按未迁移处理", module="schema", exception=exc, marker=self.marker_key)
            return False

    def _write_marker(self) -> None:
        if not self.cache:
            return
        try:
            self.cache.set(self.marker_key, "1", timeout=0)
        except CACHE_EXCEPTIONS as exc:
            # 结构已就绪,标记写入失败只会让其他进程重复执行一次幂等迁移
            log_warning("写入迁移标记失败", module="schema", exception=exc, marker=self.marker_key)

    def apply_structural_changes(self) -> list[str]:
        """执行全部幂等结构变更.

        Returns:
            list[str]: 本次新增的列,格式为 `table.column`.

        Raises:
            SQLAlchemyError: 除"已存在"之外的数据库错误.

        """
        engine = self.database.engine
        self.database.metadata.create_all(bind=engine, checkfirst=True)
        added = self._add_missing_columns(engine)
        self._create_indexes(engine)
        with engine.begin() as connection:
            self._backfill_category_names(connection)
        return added

    def _add_missing_columns(self, engine: Engine) -> list[str]:
        inspector = inspect(engine)
        existing: dict[str, set[str]] = {}
        added: list[str] = []
        for patch in OPTIONAL_COLUMNS:
            if patch.table not in existing:
                existing[patch.table] = {column["name"] for column in inspector.get_columns(patch.table)}
            if patch.column in existing[patch.table]:
                continue
            statement = self._render_add_column(engine, patch)
            try:
                with engine.begin() as connection:
                    connection.exec_driver_sql(statement)
            except SQLAlchemyError as exc:
                if not _is_already_exists(exc):
                    raise
                logger.info("列已由其他进程添加", table=patch.table, column=patch.column)
                continue
            existing[patch.table].add(patch.column)
            added.append(f"{patch.table}.{patch.column}")
        return added

    def _render_add_column(self, engine: Engine, patch: ColumnPatch) -> str:
        dialect = engine.dialect
        preparer = dialect.identifier_preparer
        column = self.database.metadata.tables[patch.table].c[patch.column]
        type_sql = column.type.compile(dialect=dialect)
        statement = f"ALTER TABLE {preparer.quote(patch.table)} ADD COLUMN {preparer.quote(patch.column)} {type_sql}"
        if patch.default is not None:
            default_sql = literal(patch.default, type_=column.type).compile(
                dialect=dialect,
                compile_kwargs={"literal_binds": True},
            )
            statement += f" DEFAULT {default_sql}"
        return statement

    def _create_indexes(self, engine: Engine) -> None:
        sites = self.database.metadata.tables["sites"]
        for index in sorted(sites.indexes, key=lambda item: item.name or ""):
            try:
                with engine.begin() as connection:
                    index.create(bind=connection, checkfirst=True)
            except SQLAlchemyError as exc:
                if not _is_already_exists(exc):
                    raise
                logger.info("索引已由其他进程创建", index=index.name)

    def _backfill_category_names(self, connection: Connection) -> None:
        sites = self.database.metadata.tables["sites"]
        category = self.database.metadata.tables["category"]
        category_name = (
            select(category.c.name).where(category.c.id == sites.c.category_id).scalar_subquery()
        )
        result = connection.execute(
            update(sites).where(sites.c.category_name.is_(None)).values(category_name=category_name),
        )
        if result.rowcount:
            logger.info("已回填书签分类名称", rows=result.rowcount)


_guard: SchemaMigrationGuard | None = None


def init_schema_guard(
    database: SQLAlchemy,
    cache: Cache,
    *,
    marker_key: str,
    state: MigrationState | None = None,
) -> SchemaMigrationGuard:
    """初始化迁移守卫并设为全局实例."""
    global _guard  # noqa: PLW0603
    _guard = SchemaMigrationGuard(database, cache, marker_key=marker_key, state=state)
    return _guard


def get_schema_guard() -> SchemaMigrationGuard | None:
    return _guard
