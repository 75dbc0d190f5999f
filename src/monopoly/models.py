from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Player(Base):
    __tablename__ = "player"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=True)


class Game(Base):
    __tablename__ = "game"

    id = Column(Integer, primary_key=True, autoincrement=True)
    time = Column(DateTime, server_default=func.current_timestamp())


class PlayerGame(Base):
    __tablename__ = "playergame"

    gameid = Column(Integer, ForeignKey("game.id", ondelete="CASCADE"), primary_key=True)
    playerid = Column(Integer, ForeignKey("player.id", ondelete="CASCADE"), primary_key=True)
    score = Column(Integer, nullable=True)


# Core tables, for statements run on the gateway's connection
player_table = Player.__table__
game_table = Game.__table__
player_game_table = PlayerGame.__table__


class PlayerRead(BaseModel):
    id: int
    name: str
    email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class GameRead(BaseModel):
    id: int
    time: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GameScore(BaseModel):
    name: str
    score: int | None = None


class PlayerDeleted(BaseModel):
    message: str
    player: PlayerRead


class GameDeleted(BaseModel):
    message: str
    game: GameRead


class ErrorBody(BaseModel):
    error: str
