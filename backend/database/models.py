from sqlalchemy import Column, Integer, String, Date, Float, TIMESTAMP, JSON, UniqueConstraint, Index
from sqlalchemy.sql import func
from .connection import Base


class District(Base):
    """districts - reference data, immutable after seeding"""
    __tablename__ = "districts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    state_code = Column(String(8), nullable=False, index=True)
    state_name = Column(String(100), nullable=False)
    district_name = Column(String(150), nullable=False, index=True)  # bilingual, e.g. "पुणे (Pune)"
    district_code = Column(String(20))
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("state_code", "district_name", name="uq_district_state_name"),
    )


class Performance(Base):
    """performance - one row per district per month"""
    __tablename__ = "performance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    state_code = Column(String(8), nullable=False, index=True)
    district_name = Column(String(150), nullable=False, index=True)
    data_month = Column(Date, nullable=False, index=True)  # first day of the month

    # Job card and worker statistics
    job_cards_issued = Column(Integer, default=0)
    households_worked = Column(Integer, default=0)
    active_workers = Column(Integer, default=0)
    women_workers = Column(Integer, default=0)
    sc_workers = Column(Integer, default=0)
    st_workers = Column(Integer, default=0)

    # Employment statistics
    avg_days_provided = Column(Float, default=0)
    total_persondays = Column(Integer, default=0)

    # Financial data
    avg_wage = Column(Float, default=0)
    total_expenditure = Column(Float, default=0)

    # Works data
    completed_works = Column(Integer, default=0)
    ongoing_works = Column(Integer, default=0)

    updated_at = Column(TIMESTAMP, server_default=func.now())
    data_source = Column(String(100), default="data.gov.in (Simulated)")

    __table_args__ = (
        UniqueConstraint("state_code", "district_name", "data_month", name="uq_performance_district_month"),
        # Latest-month lookups sort on data_month within a district
        Index("ix_performance_latest", "state_code", "district_name", "data_month"),
    )


class ApiLog(Base):
    """api_logs - append-only request audit trail"""
    __tablename__ = "api_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    endpoint = Column(String(100), nullable=False, index=True)
    ip_address = Column(String(64))
    user_agent = Column(String(500))
    request_params = Column(JSON)
    response_status = Column(Integer)
    response_time_ms = Column(Integer)
    error_message = Column(String(500))
    created_at = Column(TIMESTAMP, server_default=func.now(), index=True)


class SyncLog(Base):
    """sync_logs - one row per data sync run"""
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sync_type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, index=True)  # 'started', 'success' or 'failed'
    records_processed = Column(Integer, default=0)
    error_message = Column(String(500))
    started_at = Column(TIMESTAMP, server_default=func.now(), index=True)
    completed_at = Column(TIMESTAMP)
