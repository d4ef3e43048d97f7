from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from paytrack.core.dependencies import get_client_service, get_filter_engine
from paytrack.schemas.client import (
    BulkImportResult,
    ClientCreate,
    ClientPage,
    ClientQuery,
    ClientResponse,
    ClientUpdate,
)
from paytrack.services.client_filter_service import ClientFilterEngine
from paytrack.services.client_service import ClientService
from paytrack.services.import_service import read_client_rows


router = APIRouter(prefix="/api/clients", tags=["Clients"])


@router.get("", response_model=ClientPage)
def list_clients(
    search: str | None = Query(None),
    month: int | None = Query(None),
    year: int | None = Query(None),
    paid: str = Query("any"),
    outstanding_min: int | None = Query(None),
    page: int = Query(1),
    page_size: int | None = Query(None),
    engine: ClientFilterEngine = Depends(get_filter_engine),
):
    criteria = ClientQuery(
        search=search,
        month=month,
        year=year,
        paid=paid,
        outstanding_min=outstanding_min,
        page=page,
        page_size=page_size,
    )
    return engine.query(criteria)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    client: ClientCreate,
    service: ClientService = Depends(get_client_service),
):
    return service.create_client(client)


@router.post("/bulk-import", response_model=BulkImportResult)
def bulk_import_clients(
    file: UploadFile = File(...),
    service: ClientService = Depends(get_client_service),
):
    rows = read_client_rows(file.filename, file.file.read())
    return service.import_clients(rows)


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: int,
    service: ClientService = Depends(get_client_service),
):
    return service.get_client(client_id)


@router.patch("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    client_data: ClientUpdate,
    service: ClientService = Depends(get_client_service),
):
    return service.update_client(client_id, client_data)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: int,
    service: ClientService = Depends(get_client_service),
):
    service.delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
