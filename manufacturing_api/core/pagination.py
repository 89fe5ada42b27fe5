from __future__ import annotations

from fastapi import Query

# shared list paging for /boms, /items, /workstations
LimitQuery = Query(50, ge=1, le=500, description="Maximum number of rows to return (max 500)")
OffsetQuery = Query(0, ge=0, description="Number of rows to skip, ordered as the endpoint documents")
