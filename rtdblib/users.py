import logging
from typing import Dict

from .codec import string_to_response, string_to_user, user_from_dict, user_to_dict, users_from_mapping
from .database import Database
from .types import PushResponse, User


USERS_PATH = "users"


def set_user(db: Database, user: User) -> PushResponse:
    response = string_to_response(db.at(USERS_PATH).set(user_to_dict(user)))
    logging.info("Created user %s", response.name)
    return response


def get_user(db: Database, user_id: str) -> User:
    user = user_from_dict(db.at(USERS_PATH).at(user_id).get())
    logging.debug("Fetched user %s: %r", user_id, user)
    return user


def get_users(db: Database) -> Dict[str, User]:
    # an empty collection reads back as null
    raw = db.at(USERS_PATH).get_json()
    users = users_from_mapping(raw) if raw is not None else {}
    logging.debug("Fetched %d users", len(users))
    return users


def update_user(db: Database, user_id: str, user: User) -> User:
    updated = string_to_user(db.at(USERS_PATH).at(user_id).update(user_to_dict(user)))
    logging.info("Updated user %s", user_id)
    return updated


def delete_user(db: Database, user_id: str) -> None:
    db.at(USERS_PATH).at(user_id).delete()
    logging.info("Deleted user %s", user_id)
