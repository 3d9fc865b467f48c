from sqlalchemy import Column, Integer, String
from app.database import Base


class Session(Base):
    __tablename__ = "sessions"

    id = Column(String(255), primary_key=True)
    # 사용자 삭제 시 연쇄 삭제하지 않음 (FK 없이 id만 참조)
    user_id = Column(Integer, nullable=False, index=True)
    expires = Column(Integer, nullable=False)  # UNIX timestamp (초)
