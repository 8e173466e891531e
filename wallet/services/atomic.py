"""
All-or-nothing units of work for balance-affecting operations.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from django.conf import settings
from django.db import DatabaseError, IntegrityError, connections, transaction

from wallet.exceptions import ConflictError, PersistenceError

logger = logging.getLogger(__name__)


def apply_deadline(using: str = 'default') -> None:
    """
    Bound statement and lock waits for the current database transaction.

    Only PostgreSQL supports transaction-local timeouts; other backends rely
    on their own connection timeout.
    """
    seconds = getattr(settings, 'WALLET_TRANSACTION_DEADLINE_SECONDS', None)
    connection = connections[using]
    if not seconds or connection.vendor != 'postgresql':
        return

    timeout = f"{int(seconds * 1000)}ms"
    with connection.cursor() as cursor:
        cursor.execute(
            "SELECT set_config('statement_timeout', %s, true), "
            "set_config('lock_timeout', %s, true)",
            [timeout, timeout],
        )


@contextmanager
def unit_of_work(operation: str, conflict_message: Optional[str] = None) -> Iterator[None]:
    """
    Run the block inside one database transaction.

    Any exception rolls the whole block back. Storage errors are re-raised as
    PersistenceError, or as ConflictError when ``conflict_message`` is given
    and a unique constraint was violated. Domain errors pass through.
    """
    try:
        with transaction.atomic():
            apply_deadline()
            yield
    except IntegrityError as exc:
        if conflict_message is not None:
            logger.info("%s rejected by a unique constraint: %s", operation, exc)
            raise ConflictError(conflict_message) from exc
        logger.exception("%s failed and was rolled back", operation)
        raise PersistenceError() from exc
    except DatabaseError as exc:
        logger.exception("%s failed and was rolled back", operation)
        raise PersistenceError() from exc
