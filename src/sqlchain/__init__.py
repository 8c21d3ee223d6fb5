"""
sqlchain - chained CRUD operations over SQLite.

Open a database, thread operations through a :class:`Chain`, get back an
``Ok``/``Err``. Values are sanitized against the live column types of the
table they are written to.

Examples:
    >>> from sqlchain import Chain, Database, last_id
    >>> result = (
    ...     Chain(Database.open("chinook.db"))
    ...     .create("artists", ["Name"], ["Nine Inch Nails"])
    ...     .apto("nin", last_id)
    ...     .chain(lambda s: Chain().get_row("artists", "ArtistId", s["nin"]))
    ...     .close()
    ...     .run()
    ... )
"""

__version__ = "0.1.0"

from sqlchain.aio import AsyncDatabase
from sqlchain.chain import Chain, ChainState, cursor, last_id
from sqlchain.core import *  # noqa
from sqlchain.core.logging import configure_logging, get_logger
from sqlchain.core.settings import SqlChainSettings, get_settings, reset_settings
from sqlchain.database import Database
