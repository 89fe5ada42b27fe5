"""
Models package.

Importing this package registers every table on Base.metadata
(Alembic autogenerate and create_all both rely on it).
"""

from __future__ import annotations

# NOTE:
# imported for the side effect of registering tables, hence the noqa.

from manufacturing_api.models import item  # noqa: F401
from manufacturing_api.models import bom  # noqa: F401
from manufacturing_api.models import workstation  # noqa: F401
