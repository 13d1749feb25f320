"""Signal receivers connected in QroyalConfig.ready()."""

import logging

from qroyal.conf import qroyal_settings

logger = logging.getLogger(__name__)


def apply_statement_timeout(sender, connection, **kwargs):
    """Bound every statement on PostgreSQL connections."""
    if connection.vendor != "postgresql":
        return
    timeout_ms = int(qroyal_settings.DB_STATEMENT_TIMEOUT_MS or 0)
    if timeout_ms <= 0:
        return
    with connection.cursor() as cursor:
        cursor.execute("SET statement_timeout = %s", [timeout_ms])
    logger.debug("statement_timeout set to %sms", timeout_ms)
