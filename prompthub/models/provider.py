from sqlalchemy import Column, String, Integer, Float, Boolean
from prompthub.db.base import Base


class LLMProvider(Base):
    __tablename__ = "llm_providers"

    id = Column(String(64), primary_key=True)  # short slug, e.g. "groq"
    name = Column(String, nullable=False)

    # Adapter tag; falls back to id when empty
    kind = Column(String(64), nullable=True)

    model = Column(String, nullable=False)
    endpoint = Column(String, nullable=True)
    max_tokens = Column(Integer, nullable=True)
    temperature = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
