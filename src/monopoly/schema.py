"""Recreate the tables and seed them with sample data.

Runs once at startup, before any request is served. Every start wipes
the previous run's rows.
"""
from datetime import datetime, timedelta
import logging

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncConnection

from .db import Gateway
from .models import Base, game_table, player_game_table, player_table

logger = logging.getLogger(__name__)

SEED_PLAYERS = [
    ("Sebastian", "seb@example.com"),
    ("Mr. Monopoly", "moneybags@example.com"),
    ("Thimble", "thimble@example.com"),
]

# (age of the game, {player name: score}), oldest game first
SEED_GAMES = [
    (timedelta(days=2), {"Sebastian": 1500, "Mr. Monopoly": 2500}),
    (timedelta(days=1), {"Sebastian": 3200, "Mr. Monopoly": 1800, "Thimble": 500}),
    (timedelta(0), {"Mr. Monopoly": 5000, "Thimble": 4500}),
]


async def recreate_schema(conn: AsyncConnection) -> None:
    # drop_all works in reverse dependency order: playergame, game, player
    await conn.run_sync(Base.metadata.drop_all)
    await conn.run_sync(Base.metadata.create_all)

    player_ids = {}
    for name, email in SEED_PLAYERS:
        result = await conn.execute(insert(player_table).values(name=name, email=email))
        player_ids[name] = result.inserted_primary_key[0]

    now = datetime.now()
    for age, scores in SEED_GAMES:
        result = await conn.execute(insert(game_table).values(time=now - age))
        game_id = result.inserted_primary_key[0]
        await conn.execute(
            insert(player_game_table),
            [
                {"gameid": game_id, "playerid": player_ids[name], "score": score}
                for name, score in scores.items()
            ],
        )


async def setup_database(gateway: Gateway) -> None:
    try:
        await gateway.run_script(recreate_schema)
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise
    logger.info("Database schema and sample data initialized successfully.")
