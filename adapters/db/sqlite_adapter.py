"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web 요청과 관리 스크립트가 동시에 접근 가능하도록 설정.

쓰기 트랜잭션은 BEGIN IMMEDIATE로 DB 쓰기 잠금을 먼저 잡아 직렬화하고,
조회는 읽기 트랜잭션(WAL 스냅샷) 안에서 수행해 반쯤 쓰인 분개를 읽지 않음.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)


async def create_connection(db_path: Path | str) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로

    Returns:
        aiosqlite 연결 객체
    """
    # pathlib.Path를 문자열로 변환
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path_str)

    # WAL 모드 설정
    await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.debug(f"SQLite 연결 생성: {db_path_str}")

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션/스냅샷 컨텍스트 매니저 제공.

    같은 연결을 공유하는 코루틴끼리 문장이 섞이지 않도록
    트랜잭션과 스냅샷은 연결별 asyncio.Lock으로 직렬화됨.
    같은 Task 안에서 중첩 호출하면 바깥 트랜잭션에 합류.

    Args:
        db_path: DB 파일 경로

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task[Any] | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """트랜잭션 진행 중 여부"""
        return self._conn is not None and self._conn.in_transaction

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("SQLite 연결 종료")

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        if parameters:
            return await conn.execute(sql, parameters)
        return await conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        conn = self._require_conn()
        return await conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def _exclusive(self) -> AsyncIterator[bool]:
        """연결 독점 (같은 Task의 중첩 호출은 통과)

        Yields:
            새로 잠금을 잡았으면 True, 이미 보유 중이면 False
        """
        task = asyncio.current_task()
        if task is not None and self._owner is task:
            yield False
            return

        async with self._lock:
            self._owner = task
            try:
                yield True
            finally:
                self._owner = None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션 컨텍스트 매니저

        BEGIN IMMEDIATE로 시작해 다른 쓰기와 직렬화.
        성공 시 자동 커밋, 예외 시 자동 롤백.

        사용 예시:
        ```python
        async with adapter.transaction() as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_conn()

        async with self._exclusive() as acquired:
            if not acquired:
                # 바깥 트랜잭션에 합류 (커밋/롤백은 바깥에서)
                yield conn
                return

            if conn.in_transaction:
                # 이전에 남은 암묵적 트랜잭션 정리
                await conn.commit()

            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[aiosqlite.Connection]:
        """읽기 스냅샷 컨텍스트 매니저

        하나의 읽기 트랜잭션 안에서 조회하여 여러 쿼리가 같은 시점을 보게 함.
        WAL 모드이므로 다른 연결의 쓰기를 막지 않음.
        """
        conn = self._require_conn()

        async with self._exclusive() as acquired:
            if not acquired:
                yield conn
                return

            if conn.in_transaction:
                await conn.commit()

            await conn.execute("BEGIN DEFERRED")
            try:
                yield conn
            finally:
                # 읽기 전용이므로 롤백으로 종료
                await conn.rollback()

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
