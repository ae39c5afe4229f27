"""
복식부기 스키마 초기화

Web/스크립트 시작 시 자동으로 Ledger 테이블, View, 트리거 생성.
CREATE IF NOT EXISTS / DROP VIEW IF EXISTS 패턴으로 안전하게 동작.

금액 컬럼은 Decimal 문자열(TEXT)로 저장하고 합산은 Python Decimal로 수행.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화 (테이블 + View + 트리거 + 기본 계정)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_views(db)
    await _create_immutability_triggers(db)
    await _insert_default_accounts(db)
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성"""

    # account 테이블 (계정과목표 + 캐시 잔액)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS account (
            id                 INTEGER PRIMARY KEY AUTOINCREMENT,
            account_code       TEXT NOT NULL UNIQUE,
            account_name       TEXT NOT NULL,
            account_type       TEXT NOT NULL
                               CHECK (account_type IN ('asset', 'liability', 'equity', 'revenue', 'expense')),
            balance            TEXT NOT NULL DEFAULT '0.00',
            is_current         INTEGER NOT NULL DEFAULT 1,
            is_cash            INTEGER NOT NULL DEFAULT 0,
            cash_flow_activity TEXT
                               CHECK (cash_flow_activity IS NULL
                                      OR cash_flow_activity IN ('operating', 'investing', 'financing')),
            is_active          INTEGER NOT NULL DEFAULT 1,
            description        TEXT,
            created_at         TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at         TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # journal_entry 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_entry (
            id                 INTEGER PRIMARY KEY AUTOINCREMENT,
            reference_number   TEXT NOT NULL UNIQUE,
            entry_date         TEXT NOT NULL,
            description        TEXT,
            transaction_type   TEXT NOT NULL,
            adjustment_type    TEXT NOT NULL DEFAULT 'NON_ADJUSTMENT',
            status             TEXT NOT NULL
                               CHECK (status IN ('pending', 'posted', 'reversed')),
            party_kind         TEXT,
            party_id           TEXT,
            reversal_of_id     INTEGER REFERENCES journal_entry(id),
            reversed_by_id     INTEGER REFERENCES journal_entry(id),
            memo               TEXT,
            created_at         TEXT NOT NULL DEFAULT (datetime('now')),
            posted_at          TEXT
        )
    """)

    # journal_line 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_line (
            id                 INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id           INTEGER NOT NULL REFERENCES journal_entry(id),
            account_id         INTEGER NOT NULL REFERENCES account(id),
            debit              TEXT NOT NULL DEFAULT '0.00',
            credit             TEXT NOT NULL DEFAULT '0.00',
            memo               TEXT,
            line_order         INTEGER NOT NULL DEFAULT 0
        )
    """)

    # fund_transfer 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS fund_transfer (
            id                 INTEGER PRIMARY KEY AUTOINCREMENT,
            from_account_id    INTEGER NOT NULL REFERENCES account(id),
            to_account_id      INTEGER NOT NULL REFERENCES account(id),
            amount             TEXT NOT NULL,
            description        TEXT,
            transfer_date      TEXT NOT NULL,
            status             TEXT NOT NULL DEFAULT 'completed'
                               CHECK (status IN ('completed', 'reversed')),
            journal_entry_id   INTEGER NOT NULL REFERENCES journal_entry(id),
            reversal_entry_id  INTEGER REFERENCES journal_entry(id),
            created_at         TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at         TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # reference_sequence 테이블 (접두사·연도별 참조번호 일련번호)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS reference_sequence (
            prefix             TEXT PRIMARY KEY,
            last_value         INTEGER NOT NULL DEFAULT 0
        )
    """)

    # 인덱스
    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_entry_date
        ON journal_entry(entry_date, id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_entry_status
        ON journal_entry(status)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_entry_party
        ON journal_entry(party_kind, party_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_line_entry
        ON journal_line(entry_id, line_order)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_line_account
        ON journal_line(account_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_fund_transfer_date
        ON fund_transfer(transfer_date)
    """)

    await db.commit()
    logger.debug("Ledger 테이블 생성 완료")


async def _create_ledger_views(db: "SQLiteAdapter") -> None:
    """Ledger View 생성

    View는 DROP 후 재생성 (정의 변경 반영).
    """

    # 계정별 원장 (전기/역분개된 분개만, 대기 분개 제외)
    await db.execute("DROP VIEW IF EXISTS v_account_ledger")
    await db.execute("""
        CREATE VIEW v_account_ledger AS
        SELECT
            jl.id               AS line_id,
            jl.entry_id         AS entry_id,
            jl.line_order       AS line_order,
            jl.account_id       AS account_id,
            a.account_code      AS account_code,
            a.account_name      AS account_name,
            a.account_type      AS account_type,
            je.entry_date       AS entry_date,
            je.reference_number AS reference_number,
            je.description      AS description,
            je.status           AS status,
            je.transaction_type AS transaction_type,
            je.party_kind       AS party_kind,
            je.party_id         AS party_id,
            jl.debit            AS debit,
            jl.credit           AS credit,
            jl.memo             AS memo
        FROM journal_line jl
        JOIN journal_entry je ON je.id = jl.entry_id
        JOIN account a ON a.id = jl.account_id
        WHERE je.status IN ('posted', 'reversed')
    """)

    await db.commit()
    logger.debug("Ledger View 생성 완료")


async def _create_immutability_triggers(db: "SQLiteAdapter") -> None:
    """전기된 분개 불변성 트리거

    - 전기/역분개된 분개와 라인은 삭제 불가
    - 전기된 분개는 status/reversed_by_id/posted_at 외 수정 불가
    - 상태 전이는 pending → posted → reversed 만 허용
    """

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_journal_entry_no_delete
        BEFORE DELETE ON journal_entry
        WHEN OLD.status != 'pending'
        BEGIN
            SELECT RAISE(ABORT, 'posted journal entries cannot be deleted');
        END
    """)

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_journal_entry_immutable
        BEFORE UPDATE ON journal_entry
        WHEN OLD.status != 'pending' AND (
            NEW.reference_number IS NOT OLD.reference_number
            OR NEW.entry_date IS NOT OLD.entry_date
            OR NEW.description IS NOT OLD.description
            OR NEW.transaction_type IS NOT OLD.transaction_type
            OR NEW.adjustment_type IS NOT OLD.adjustment_type
            OR NEW.party_kind IS NOT OLD.party_kind
            OR NEW.party_id IS NOT OLD.party_id
            OR NEW.reversal_of_id IS NOT OLD.reversal_of_id
        )
        BEGIN
            SELECT RAISE(ABORT, 'posted journal entries are immutable');
        END
    """)

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_journal_entry_status_transition
        BEFORE UPDATE OF status ON journal_entry
        WHEN NEW.status != OLD.status AND NOT (
            (OLD.status = 'pending' AND NEW.status = 'posted')
            OR (OLD.status = 'posted' AND NEW.status = 'reversed')
        )
        BEGIN
            SELECT RAISE(ABORT, 'invalid journal entry status transition');
        END
    """)

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_journal_line_immutable
        BEFORE UPDATE ON journal_line
        WHEN (SELECT status FROM journal_entry WHERE id = OLD.entry_id) != 'pending'
        BEGIN
            SELECT RAISE(ABORT, 'lines of posted journal entries are immutable');
        END
    """)

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_journal_line_no_delete
        BEFORE DELETE ON journal_line
        WHEN (SELECT status FROM journal_entry WHERE id = OLD.entry_id) != 'pending'
        BEGIN
            SELECT RAISE(ABORT, 'lines of posted journal entries cannot be deleted');
        END
    """)

    await db.commit()
    logger.debug("불변성 트리거 생성 완료")


async def _insert_default_accounts(db: "SQLiteAdapter") -> None:
    """기본 계정 삽입

    DEFAULT_ACCOUNTS에 정의된 모든 계정을 생성.
    이미 존재하는 계정 코드는 무시 (INSERT OR IGNORE).
    """
    from core.ledger.types import DEFAULT_ACCOUNTS

    await db.executemany(
        """
        INSERT OR IGNORE INTO account (
            account_code, account_name, account_type,
            is_current, is_cash, cash_flow_activity
        ) VALUES (?, ?, ?, ?, ?, ?)
        """,
        DEFAULT_ACCOUNTS,
    )

    await db.commit()
    logger.debug(f"기본 계정 삽입 완료: {len(DEFAULT_ACCOUNTS)}개")
