#!/usr/bin/env python3
"""
Connect to a database and print its statistics.

Settings come from explicit arguments first, then from the environment:
    MONGODB_URI       connection URI, may contain <username> and <password>
    MONGODB_USERNAME  substituted for <username>
    MONGODB_PASSWORD  substituted for <password>
    MONGODB_DB_NAME   database name
Built-in defaults apply when neither is set.
"""

import asyncio

from bson import json_util

from mongoat import Database, DatabaseConfig


async def main():
    async with Database(DatabaseConfig(db_name="mongoat-example")) as database:
        info = await database.info()
        print("Database info:", json_util.dumps(info, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
