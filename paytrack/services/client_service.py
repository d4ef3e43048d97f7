import logging

from pydantic import ValidationError as SchemaValidationError

from paytrack.core.errors import NotFoundError, ValidationError
from paytrack.db.store import RecordStore
from paytrack.models.client import Client
from paytrack.schemas.client import (
    BulkImportResult,
    ClientCreate,
    ClientUpdate,
    ImportResults,
    ImportRowError,
)


logger = logging.getLogger(__name__)


def describe_errors(exc: SchemaValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )


def _as_validation_error(exc: SchemaValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "body"
    return ValidationError(field, first["msg"])


class ClientService:

    def __init__(self, store: RecordStore):
        self.store = store

    def get_client(self, client_id: int) -> Client:
        client = self.store.get_client(client_id)
        if client is None:
            raise NotFoundError("Client", client_id)
        return client

    def create_client(self, data) -> Client:
        if not isinstance(data, ClientCreate):
            try:
                data = ClientCreate.model_validate(data)
            except SchemaValidationError as exc:
                raise _as_validation_error(exc) from exc

        client = self.store.insert_client(data.model_dump())
        logger.info("Client '%s' created (id=%s)", client.name, client.id)
        return client

    def update_client(self, client_id: int, data) -> Client:
        if not isinstance(data, ClientUpdate):
            try:
                data = ClientUpdate.model_validate(data)
            except SchemaValidationError as exc:
                raise _as_validation_error(exc) from exc

        client = self.store.update_client(client_id, data.model_dump(exclude_unset=True))
        if client is None:
            raise NotFoundError("Client", client_id)

        logger.info("Client '%s' updated (id=%s)", client.name, client.id)
        return client

    def delete_client(self, client_id: int) -> None:
        if not self.store.delete_client(client_id):
            raise NotFoundError("Client", client_id)
        logger.info("Client %s deleted with its payments", client_id)

    def import_clients(self, rows: list[tuple[int, dict]]) -> BulkImportResult:
        """
        Create one client per ``(row_number, row)`` pair.

        A row that fails validation is reported under its row number and the
        remaining rows are still imported. Store outages are not row errors
        and abort the import.
        """
        results = ImportResults()

        for row_number, row in rows:
            try:
                data = ClientCreate.model_validate(row)
            except SchemaValidationError as exc:
                results.errors.append(
                    ImportRowError(row=row_number, error=describe_errors(exc))
                )
                continue

            client = self.store.insert_client(data.model_dump())
            results.success.append(client.name)

        logger.info(
            "Bulk import finished: %s created, %s rejected",
            len(results.success),
            len(results.errors),
        )

        return BulkImportResult(
            message=f"Imported {len(results.success)} clients successfully",
            results=results,
        )
