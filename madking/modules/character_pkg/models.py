# madking/modules/character_pkg/models.py
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from ...database import Base
from ..catalog_pkg.models import utcnow


class Character(Base):
    __tablename__ = "characters"

    id = Column(String, primary_key=True, index=True)
    name = Column(String(100), index=True, nullable=False)

    race_id = Column(String, ForeignKey("races.id"), nullable=False)
    class_id = Column(String, ForeignKey("classes.id"), nullable=False)
    origin_id = Column(String, ForeignKey("origins.id"), nullable=False)
    subclass = Column(String, nullable=True)

    level = Column(Integer, default=1)
    experience = Column(Integer, default=0)
    hp = Column(Integer)
    max_hp = Column(Integer)
    mana = Column(Integer, nullable=True)  # NULL = no mana pool
    max_mana = Column(Integer, nullable=True)
    base_ac = Column(Integer, default=10)
    base_speed = Column(Integer, default=30)
    currency = Column(Integer, default=0)
    backstory = Column(Text, default="")

    stats = Column(JSON)
    skills = Column(JSON)
    extra_skills = Column(JSON, default=list)
    speed_modifiers = Column(JSON, default=list)
    spells = Column(JSON, default=list)  # [spell_id, ...]
    items = Column(JSON, default=list)  # [{"item_id", "quantity", "equipped"}, ...]
    equipped_slots = Column(JSON)  # {"mainHand": item_id | None, ...}

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
