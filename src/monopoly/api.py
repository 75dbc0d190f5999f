from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy import delete, select

from .db import Gateway, get_gateway
from .errors import NotFoundError
from .models import (
    GameDeleted,
    GameRead,
    GameScore,
    PlayerDeleted,
    PlayerRead,
    game_table,
    player_game_table,
    player_table,
)

GREETING = "Hello, CS 262 Monopoly service!"
PLAYER_NOT_FOUND = "Player not found"
GAME_NOT_FOUND = "Game not found"

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    return GREETING


# Players

@router.get("/players", response_model=List[PlayerRead])
async def list_players(gateway: Gateway = Depends(get_gateway)):
    return await gateway.fetch_all(select(player_table).order_by(player_table.c.name))


@router.get("/players/{player_id}", response_model=PlayerRead)
async def get_player(player_id: int, gateway: Gateway = Depends(get_gateway)):
    rows = await gateway.fetch_all(select(player_table).where(player_table.c.id == player_id))
    if not rows:
        raise NotFoundError(PLAYER_NOT_FOUND)
    return rows[0]


@router.delete("/players/{player_id}", response_model=PlayerDeleted)
async def delete_player(player_id: int, gateway: Gateway = Depends(get_gateway)):
    # ON DELETE CASCADE removes the player's scores
    statement = (
        delete(player_table)
        .where(player_table.c.id == player_id)
        .returning(*player_table.c)
    )
    rows = await gateway.fetch_all(statement)
    if not rows:
        raise NotFoundError(PLAYER_NOT_FOUND)
    return PlayerDeleted(message="Player deleted successfully", player=rows[0])


# Games

@router.get("/games", response_model=List[GameRead])
async def list_games(gateway: Gateway = Depends(get_gateway)):
    return await gateway.fetch_all(select(game_table).order_by(game_table.c.time.desc()))


@router.get("/games/{game_id}", response_model=List[GameScore])
async def get_game(game_id: int, gateway: Gateway = Depends(get_gateway)):
    """Scores of one game, highest first."""
    statement = (
        select(player_table.c.name, player_game_table.c.score)
        .join(player_game_table, player_table.c.id == player_game_table.c.playerid)
        .where(player_game_table.c.gameid == game_id)
        .order_by(player_game_table.c.score.desc())
    )
    rows = await gateway.fetch_all(statement)
    if rows:
        return rows

    # No scores: tell an empty game apart from a missing one
    games = await gateway.fetch_all(select(game_table.c.id).where(game_table.c.id == game_id))
    if not games:
        raise NotFoundError(GAME_NOT_FOUND)
    return []


@router.delete("/games/{game_id}", response_model=GameDeleted)
async def delete_game(game_id: int, gateway: Gateway = Depends(get_gateway)):
    # ON DELETE CASCADE removes the game's scores
    statement = (
        delete(game_table)
        .where(game_table.c.id == game_id)
        .returning(*game_table.c)
    )
    rows = await gateway.fetch_all(statement)
    if not rows:
        raise NotFoundError(GAME_NOT_FOUND)
    return GameDeleted(message="Game deleted successfully", game=rows[0])
