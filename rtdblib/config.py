from dataclasses import dataclass


DEFAULT_DATABASE_URL = "https://rust-crud-ef9ab-default-rtdb.firebaseio.com/"
DEFAULT_USER_AGENT = "rtdb-crud/1.0"


@dataclass(frozen=True)
class ClientConfig:
    database_url: str = DEFAULT_DATABASE_URL
    request_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    max_connections: int = 4
    # transport retries, applied to idempotent methods only
    retries: int = 0
