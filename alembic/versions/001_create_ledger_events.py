"""001: create ledger_events table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_events (
            id              BIGSERIAL       PRIMARY KEY,
            event_id        VARCHAR(64)     NOT NULL UNIQUE,
            market_id       VARCHAR(64)     NOT NULL,
            event_type      VARCHAR(30)     NOT NULL,
            participant     VARCHAR(64),
            payload         JSONB           NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_event_type CHECK (
                event_type IN (
                    'MARKET_CREATED',
                    'BUY',
                    'SELL',
                    'SWAP',
                    'MARKET_RESOLVED',
                    'REWARD_COLLECTED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_events_market_time ON ledger_events (market_id, created_at);")
    op.execute(
        "CREATE INDEX idx_ledger_events_participant ON ledger_events (participant) "
        "WHERE participant IS NOT NULL;"
    )
    op.execute("COMMENT ON TABLE ledger_events IS 'Market ledger audit log, append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_events CASCADE;")
