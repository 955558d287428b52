from sqlalchemy import Column, Integer, BigInteger, String, Boolean, ForeignKey, DateTime, Text, JSON, Index
from datetime import datetime
from .db import Base
from .identifiers import new_id
from sqlalchemy.orm import relationship
import uuid

TOKEN_PURPOSE_AUTH = "auth"


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    tokens = relationship(
        "UserToken",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserToken.id",
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class UserToken(Base):
    __tablename__ = "user_tokens"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    purpose = Column(String, default=TOKEN_PURPOSE_AUTH, nullable=False)
    token = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="tokens")


class Todo(Base):
    __tablename__ = "todos"
    id = Column(String(32), primary_key=True, default=new_id)
    text = Column(Text, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    # Epoch milliseconds, set only while completed is true
    completed_at = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Todo(id={self.id}, completed={self.completed})>"


class AuthEvent(Base):
    __tablename__ = "auth_events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(32), nullable=False)
    email = Column(String, nullable=False)
    event_type = Column(String, nullable=False)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    event_metadata = Column(JSON, nullable=True)

    __table_args__ = (
        Index('ix_auth_events_user_id_timestamp', 'user_id', 'timestamp'),
        Index('ix_auth_events_event_type', 'event_type'),
    )
