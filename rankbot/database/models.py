from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Enum as SQLEnum,
    UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from enum import Enum

Base = declarative_base()

class Platform(Enum):
    PC = "PC"
    PS5 = "PS5"
    XBOX = "XBOX"

    @property
    def display_name(self) -> str:
        return f"UFL {self.value}"

class FightMethod(Enum):
    KO = "KO"
    DECISION = "Decision"
    DRAW = "Draw"

class Fighter(Base):
    __tablename__ = 'fighters'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    platform = Column(SQLEnum(Platform), nullable=False, index=True)

    # Derived from the fight log (see RecordCalculator)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    draws = Column(Integer, nullable=False, default=0)
    ko_wins = Column(Integer, nullable=False, default=0)

    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('name', 'platform', name='uq_fighter_identity'),
        CheckConstraint('wins >= 0 AND losses >= 0 AND draws >= 0 AND ko_wins >= 0',
                        name='ck_fighter_counts_non_negative'),
    )

    def __repr__(self):
        return f"<Fighter(name='{self.name}', platform={self.platform.value}, record={self.wins}-{self.losses}-{self.draws})>"

class Fight(Base):
    __tablename__ = 'fights'

    id = Column(Integer, primary_key=True)

    # Fighters are referenced by name within the platform
    fighter1 = Column(String(100), nullable=False)
    fighter2 = Column(String(100), nullable=False)
    winner = Column(String(100), nullable=False)  # fighter1, fighter2 or "Draw"
    method = Column(SQLEnum(FightMethod), nullable=False)
    platform = Column(SQLEnum(Platform), nullable=False)
    date = Column(Date, nullable=False)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index('ix_fights_platform_date', 'platform', 'date'),
    )

    def __repr__(self):
        return f"<Fight(id={self.id}, {self.fighter1} vs {self.fighter2}, winner='{self.winner}', method={self.method.value})>"

class Champion(Base):
    __tablename__ = 'champions'

    # One slot per platform
    platform = Column(SQLEnum(Platform), primary_key=True)
    fighter_name = Column(String(100), nullable=False)

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Champion(platform={self.platform.value}, fighter='{self.fighter_name}')>"
