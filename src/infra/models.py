"""
SQLAlchemy ORM models for database tables
"""

from datetime import datetime, timezone
from sqlalchemy import BigInteger, Boolean, Column, DateTime, Float, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
import uuid

Base = declarative_base()


class WebAppDataModel(Base):
    """SQLAlchemy ORM model for web_app_data table"""

    __tablename__ = "web_app_data"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    address = Column(String(42), nullable=False)
    playfab_id = Column(String(64), nullable=True)
    web_app_tier = Column(String(20), nullable=True)
    monthly_trading_volume = Column(Float, default=0, nullable=False)
    total_trading_volume = Column(Float, default=0, nullable=False)
    total_rec_deposited = Column(Float, default=0, nullable=False)
    total_res_deposited = Column(Float, default=0, nullable=False)
    total_xres_claimed = Column(Float, default=0, nullable=False)
    total_xrec_claimed = Column(Float, default=0, nullable=False)
    last_xres_claim_time = Column(BigInteger, default=0, nullable=False)
    last_xrec_claim_time = Column(BigInteger, default=0, nullable=False)
    can_claim = Column(Boolean, default=False, nullable=False)
    can_deposit = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    __table_args__ = (
        Index('idx_web_app_data_address', 'address', unique=True),
        Index('idx_web_app_data_playfab_id', 'playfab_id'),
        Index('idx_web_app_data_tier', 'web_app_tier'),
    )

    def __repr__(self):
        return f"<WebAppData(address='{self.address}', tier='{self.web_app_tier}', can_claim={self.can_claim})>"


class RealmHunterDataModel(Base):
    """SQLAlchemy ORM model for realm_hunter_data table"""

    __tablename__ = "realm_hunter_data"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    address = Column(String(42), nullable=False)
    account_level = Column(Integer, default=0, nullable=False)
    quests_completed = Column(Integer, default=0, nullable=False)
    pvp_mmr = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_realm_hunter_data_address', 'address', unique=True),
    )

    def __repr__(self):
        return f"<RealmHunterData(address='{self.address}', level={self.account_level})>"
