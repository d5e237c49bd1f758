"""
Model definition example: a users collection with a closed schema, a
unique index, insert defaults and a pre-insert hook.

Print the validator MongoDB will enforce:
    mongoat validator examples/model/models.py
"""

import hashlib
from datetime import datetime, timezone

from mongoat import Database, DatabaseConfig, OperationKind

database = Database(DatabaseConfig(db_name="mongoat-example"))

schema = {
    "bsonType": "object",
    "properties": {
        "username": {"bsonType": "string", "description": "Username of the user"},
        "password": {"bsonType": "string", "description": "Password of the user"},
        "mail": {
            "bsonType": "string",
            "description": "Mail of the user",
            "pattern": "^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\\.[a-zA-Z0-9-.]+$",
        },
        "firstName": {"bsonType": "string", "description": "First name of the user"},
        "lastName": {"bsonType": "string", "description": "Last name of the user"},
        "insertedAt": {"bsonType": "date", "description": "Date of the user creation"},
        "updatedAt": {"bsonType": "date", "description": "Date of last update of the user"},
    },
    "required": ["firstName", "lastName", "mail", "password", "username"],
}

indexes = [
    {
        "key": {"username": 1, "mail": 1},
        "name": "unique_username_mail",
        "unique": True,
    }
]

User = database.define_model(
    "users",
    schema,
    indexes=indexes,
    validity=True,
    defaults={"insertedAt": lambda: datetime.now(timezone.utc)},
)


# Example only; use a real password hashing scheme in applications.
def hash_password(document, options):
    document["password"] = hashlib.sha256(document["password"].encode()).hexdigest()


User.pre(OperationKind.INSERT, hash_password)
