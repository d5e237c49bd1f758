#!/usr/bin/env python3
"""
Usage example for the users model.

Requires a running MongoDB (MONGODB_URI, default mongodb://127.0.0.1:27017/).
Run from the repository root:
    python examples/model/usage.py
"""

import asyncio

from models import User, database

from mongoat import OperationNotAllowedError


async def main():
    await database.connect()
    try:
        await database.setup_collections()
        await database.clean_collections()

        document = await User.insert(
            {
                "username": "foobar",
                "mail": "foo@bar.com",
                "password": "strongPassword",
                "firstName": "Foo",
                "lastName": "Bar",
            }
        )
        print("DOCUMENT INSERTED:", document["firstName"])  # Foo

        updated = await User.update(
            {"_id": document["_id"]},
            {"$set": {"firstName": "John", "lastName": "Doe"}},
        )
        print("DOCUMENT UPDATED:", updated["firstName"])  # John

        await User.insert(
            {
                "username": "anotherUser",
                "mail": "another@user.com",
                "password": "strongPassword",
                "firstName": "Another",
                "lastName": "User",
            }
        )

        documents = await User.find_many()
        print("ALL DOCUMENTS:", len(documents))  # 2

        await User.delete({"username": "foobar"})
        print("TOTAL DOCUMENTS:", await User.total())  # 1

        try:
            await User.delete_many({})
        except OperationNotAllowedError as e:
            print("REJECTED:", e)
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
