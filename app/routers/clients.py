"""Client router - API endpoints for client management."""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.database import get_database
from app.exceptions import NotFoundError
from app.models.client import Client, ClientCreate, ClientUpdate
from app.models.user import CurrentUser
from app.routers.auth import get_current_user, require_admin
from app.services.client_service import ClientService


router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    client: ClientCreate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """Create a new client (admin only)."""
    service = ClientService(db)
    return await service.create_client(user_id=admin.id, client_create=client)


@router.get("", response_model=list[Client])
async def list_clients(
    include_archived: bool = Query(False, alias="includeArchived"),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """List clients, archived ones only on request."""
    service = ClientService(db)
    return await service.list_clients(include_archived=include_archived)


@router.get("/{client_id}", response_model=Client)
async def get_client(
    client_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Get a single client.

    Raises:
        HTTPException: If client not found (404)
    """
    service = ClientService(db)
    client = await service.get_client(client_id)

    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    return client


@router.patch("/{client_id}", response_model=Client)
async def update_client(
    client_id: int,
    client_update: ClientUpdate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """Rename or archive a client (admin only)."""
    service = ClientService(db)

    try:
        return await service.update_client(client_id, client_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
