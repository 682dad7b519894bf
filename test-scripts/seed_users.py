import os
import sys

# Ensure repo root on sys.path so we can import config/app modules when run from test-scripts
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import asyncio
from getpass import getpass

from app.database.conn import mongo_client
from app.database.store import mongo_store
from app.services.auth.auth_utils import hash_password


async def main() -> None:
    email = os.getenv("SEED_USER_EMAIL") or input("Email: ")
    password = os.getenv("SEED_USER_PASSWORD") or getpass("Password: ")
    name = os.getenv("SEED_USER_NAME") or input("Name: ")
    role = os.getenv("SEED_USER_ROLE") or input("Role (student/supervisor/admin) [admin]: ") or "admin"
    faculty = os.getenv("SEED_USER_FACULTY") or input("Faculty [Administration]: ") or "Administration"

    if not mongo_client.configured:
        sys.exit("MONGO_URI is not set; seeding only makes sense against MongoDB")

    await mongo_client.connect()
    try:
        if not await mongo_client.ping():
            sys.exit("MongoDB is unreachable")
        users = mongo_store().users
        existing = await users.find_one({"email": email.strip().lower()})
        if existing:
            print({"_id": existing["_id"], "email": existing["email"], "role": existing["role"], "created": False})
            return
        created = await users.create({
            "name": name,
            "email": email,
            "password": hash_password(password),
            "role": role,
            "faculty": faculty,
            "is_active": True,
            "last_login": None,
        })
        print({"_id": created["_id"], "email": created["email"], "role": created["role"], "created": True})
    finally:
        if mongo_client.client:
            await mongo_client.close()


if __name__ == "__main__":
    asyncio.run(main())
