# Models package init
"""
RICHIEAT Backend — ORM Models
===============================

Importing this package registers every table with `Base.metadata`
(Alembic autogenerate and the test suite's `create_all` rely on it).
"""

from richieat.models.advisor import Advisor
from richieat.models.client import Client

__all__ = ["Advisor", "Client"]
