import aiosqlite
import os
from pathlib import Path

from notifybot.logger import logger

SQL_DIR = Path(__file__).parent / "sql"
SCHEMA_VERSION = 1


async def init_db(db_path: str) -> aiosqlite.Connection:
    """打开数据库并按 PRAGMA user_version 执行迁移"""
    if db_path != ":memory:":
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

    conn = await aiosqlite.connect(db_path)

    async with conn.execute("PRAGMA user_version") as cursor:
        row = await cursor.fetchone()
        user_version = row[0]

    if user_version < 1:
        init_sql = (SQL_DIR / "db_init_v1.sql").read_text(encoding="utf-8")
        await conn.executescript(init_sql)
        await conn.execute("PRAGMA user_version = 1")

    # 数据库升级逻辑可以在这里继续添加
    await conn.commit()
    logger.info(f"数据库已就绪: {db_path} (schema v{SCHEMA_VERSION})")
    return conn


async def close_db(conn: aiosqlite.Connection | None) -> None:
    if conn is not None:
        await conn.close()


__all__ = ["init_db", "close_db", "SCHEMA_VERSION"]
