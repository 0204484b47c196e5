import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Dict

from .database import Database
from .types import User
from .users import delete_user, get_user, get_users, set_user, update_user


SAMPLE_USER = User(name="John Doe", age=25, email="johndoe@gmail.com")
UPDATED_EMAIL = "newupdatedemail@gmail.com"


@dataclass(frozen=True)
class DemoResult:
    user_id: str
    fetched: User
    all_users: Dict[str, User]
    updated: User


def run_demo(db: Database, echo: Callable[[str], None] = print) -> DemoResult:
    """Write, read, list, update and delete one user, echoing each result.

    The first failing call aborts the sequence; its exception propagates.
    """
    user = dataclasses.replace(SAMPLE_USER)
    logging.info("Running CRUD demo against %s", db.url)

    response = set_user(db, user)

    fetched = get_user(db, response.name)
    echo(repr(fetched))

    all_users = get_users(db)
    echo(repr(all_users))

    to_update = dataclasses.replace(fetched, email=UPDATED_EMAIL)
    updated = update_user(db, response.name, to_update)
    echo(repr(updated))

    delete_user(db, response.name)
    echo("User deleted")

    return DemoResult(user_id=response.name, fetched=fetched, all_users=all_users, updated=updated)
