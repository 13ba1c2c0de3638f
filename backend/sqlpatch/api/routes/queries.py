from fastapi import APIRouter, HTTPException

from sqlpatch.api.deps import RegistryDep
from sqlpatch.schemas import QueriesPublic, QueryPublic

router = APIRouter(prefix="/queries", tags=["queries"])


@router.get("/", response_model=QueriesPublic)
def list_queries(registry: RegistryDep) -> QueriesPublic:
    """
    All loaded query templates, in load order.
    """
    data = [QueryPublic.from_definition(q) for q in registry]
    return QueriesPublic(data=data, count=len(data))


@router.get("/{query_id}", response_model=QueryPublic)
def get_query(query_id: str, registry: RegistryDep) -> QueryPublic:
    query = registry.find(query_id)
    if query is None:
        raise HTTPException(status_code=404, detail="Query not found")
    return QueryPublic.from_definition(query)
