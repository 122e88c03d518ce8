"""Database model for contact form submissions."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from portfolio_service.shared.database import Base


class PortfolioMessage(Base):
    """A contact form submission. Rows are written once and never updated."""
    __tablename__ = "portfolio"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    number = Column(String, nullable=False)
    email = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
