"""Google Docs client wrapper with Drive-backed folder management."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, TYPE_CHECKING, Tuple, Union

from googleapiclient.discovery import build

from workspace_bridge.core.errors import ApiError, NotFoundError, translate_provider_errors
from workspace_bridge.schemas import Document, Folder

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from workspace_bridge.services.credential_manager import (
        AuthorizationContext,
        CredentialManager,
    )

DOCUMENT_MIME_TYPE = "application/vnd.google-apps.document"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
_FILE_FIELDS = "webViewLink,createdTime,modifiedTime"


def _quote(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _find_folder(drive: Any, name: str) -> Optional[str]:
    query = f"name='{_quote(name)}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
    response = drive.files().list(q=query, fields="files(id)", pageSize=1).execute()
    files = response.get("files", [])
    return files[0]["id"] if files else None


def _require_folder(drive: Any, name: str, label: str = "Folder") -> str:
    folder_id = _find_folder(drive, name)
    if not folder_id:
        raise NotFoundError(f"{label} '{name}' not found")
    return folder_id


def _create_folder(drive: Any, name: str, parent_id: Optional[str] = None, fields: str = "id") -> dict:
    metadata: dict = {"name": name, "mimeType": FOLDER_MIME_TYPE}
    if parent_id:
        metadata["parents"] = [parent_id]
    return drive.files().create(body=metadata, fields=fields).execute()


def _content_requests(content: str) -> List[dict]:
    return [{"insertText": {"location": {"index": 1}, "text": content}}]


class GoogleDocsClient:
    """Manage Google Docs documents and the Drive folders that hold them."""

    API_SCOPES = (
        "https://www.googleapis.com/auth/documents",
        "https://www.googleapis.com/auth/drive",
    )

    def __init__(self, credential_manager: "CredentialManager") -> None:
        self._credentials = credential_manager

    @staticmethod
    def _services(context: "AuthorizationContext") -> Tuple[Any, Any]:
        credentials = context.to_google_credentials()
        docs = build("docs", "v1", credentials=credentials, cache_discovery=False)
        drive = build("drive", "v3", credentials=credentials, cache_discovery=False)
        return docs, drive

    async def create(
        self,
        title: str,
        *,
        content: Optional[str] = None,
        folder: Optional[str] = None,
    ) -> Document:
        """Create a document, optionally seeding text and filing it under ``folder``.

        The folder is created when it does not exist yet.
        """
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_create() -> Document:
                docs, drive = self._services(context)
                doc = docs.documents().create(body={"title": title}).execute()
                document_id = doc["documentId"]

                if content:
                    docs.documents().batchUpdate(
                        documentId=document_id,
                        body={"requests": _content_requests(content)},
                    ).execute()

                if folder:
                    folder_id = _find_folder(drive, folder) or _create_folder(drive, folder)["id"]
                    current = drive.files().get(fileId=document_id, fields="parents").execute()
                    drive.files().update(
                        fileId=document_id,
                        addParents=folder_id,
                        removeParents=",".join(current.get("parents", [])),
                        fields="id, parents",
                    ).execute()

                file = drive.files().get(fileId=document_id, fields=_FILE_FIELDS).execute()
                return Document.from_drive_file({**file, "id": document_id}, title=doc.get("title"))

            return await asyncio.to_thread(_execute_create)

    async def find(self, document_id: str) -> Document:
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_find() -> Document:
                docs, drive = self._services(context)
                return self._describe(docs, drive, document_id)

            return await asyncio.to_thread(_execute_find)

    async def update(self, document_id: str, content: str) -> Document:
        """Replace the whole body of a document with ``content``."""
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_update() -> Document:
                docs, drive = self._services(context)
                doc = docs.documents().get(documentId=document_id).execute()
                body_content = doc.get("body", {}).get("content", [])
                end_index = body_content[-1].get("endIndex", 1) if body_content else 1

                # The final newline of the body cannot be deleted.
                if end_index - 1 > 1:
                    docs.documents().batchUpdate(
                        documentId=document_id,
                        body={
                            "requests": [
                                {
                                    "deleteContentRange": {
                                        "range": {"startIndex": 1, "endIndex": end_index - 1}
                                    }
                                }
                            ]
                        },
                    ).execute()
                docs.documents().batchUpdate(
                    documentId=document_id,
                    body={"requests": _content_requests(content)},
                ).execute()
                return self._describe(docs, drive, document_id)

            return await asyncio.to_thread(_execute_update)

    async def list(self, *, folder: Optional[str] = None, limit: int = 100) -> List[Document]:
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_list() -> List[Document]:
                _, drive = self._services(context)
                query_parts = [f"mimeType='{DOCUMENT_MIME_TYPE}'", "trashed=false"]
                if folder:
                    query_parts.append(f"'{_require_folder(drive, folder)}' in parents")
                response = (
                    drive.files()
                    .list(
                        q=" and ".join(query_parts),
                        fields=f"files(id,name,{_FILE_FIELDS})",
                        pageSize=limit,
                    )
                    .execute()
                )
                return [Document.from_drive_file(item) for item in response.get("files", [])]

            return await asyncio.to_thread(_execute_list)

    async def delete(self, document_id: str) -> bool:
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_delete() -> None:
                _, drive = self._services(context)
                drive.files().delete(fileId=document_id).execute()

            await asyncio.to_thread(_execute_delete)
        return True

    async def list_folders(
        self,
        *,
        parent_folder: Optional[str] = None,
        limit: int = 100,
    ) -> List[Folder]:
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_list() -> List[Folder]:
                _, drive = self._services(context)
                query_parts = [f"mimeType='{FOLDER_MIME_TYPE}'", "trashed=false"]
                if parent_folder:
                    parent_id = _require_folder(drive, parent_folder, label="Parent folder")
                    query_parts.append(f"'{parent_id}' in parents")
                response = (
                    drive.files()
                    .list(
                        q=" and ".join(query_parts),
                        fields="files(id,name,createdTime,modifiedTime,parents)",
                        pageSize=limit,
                        orderBy="name",
                    )
                    .execute()
                )
                return [Folder.from_drive_file(item) for item in response.get("files", [])]

            return await asyncio.to_thread(_execute_list)

    async def list_folder_contents(
        self,
        folder_name: str,
        *,
        limit: int = 100,
    ) -> List[Union[Folder, Document]]:
        """List the documents and sub-folders directly inside ``folder_name``."""
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_list() -> List[Union[Folder, Document]]:
                _, drive = self._services(context)
                return self._folder_contents(drive, _require_folder(drive, folder_name), limit)

            return await asyncio.to_thread(_execute_list)

    async def create_folder(self, folder_name: str, *, parent_folder: Optional[str] = None) -> Folder:
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_create() -> Folder:
                _, drive = self._services(context)
                if _find_folder(drive, folder_name):
                    raise ApiError(f"Folder '{folder_name}' already exists")
                parent_id = None
                if parent_folder:
                    parent_id = _require_folder(drive, parent_folder, label="Parent folder")
                created = _create_folder(
                    drive,
                    folder_name,
                    parent_id,
                    fields="id,name,createdTime,modifiedTime,parents",
                )
                return Folder.from_drive_file(created)

            return await asyncio.to_thread(_execute_create)

    async def delete_folder(self, folder_name: str, *, force: bool = False) -> bool:
        """Delete a folder; a non-empty folder requires ``force=True``."""
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_delete() -> None:
                _, drive = self._services(context)
                folder_id = _require_folder(drive, folder_name)
                if not force and self._folder_contents(drive, folder_id, 1):
                    raise ApiError(
                        f"Folder '{folder_name}' is not empty. Use force=True to delete anyway."
                    )
                drive.files().delete(fileId=folder_id).execute()

            await asyncio.to_thread(_execute_delete)
        return True

    @staticmethod
    def _describe(docs: Any, drive: Any, document_id: str) -> Document:
        doc = docs.documents().get(documentId=document_id).execute()
        file = drive.files().get(fileId=document_id, fields=_FILE_FIELDS).execute()
        return Document.from_drive_file({**file, "id": doc["documentId"]}, title=doc.get("title"))

    @staticmethod
    def _folder_contents(drive: Any, folder_id: str, limit: int) -> List[Union[Folder, Document]]:
        response = (
            drive.files()
            .list(
                q=f"'{folder_id}' in parents and trashed=false",
                fields=f"files(id,name,mimeType,{_FILE_FIELDS})",
                pageSize=limit,
                orderBy="folder,name",
            )
            .execute()
        )
        entries: List[Union[Folder, Document]] = []
        for item in response.get("files", []):
            if item.get("mimeType") == FOLDER_MIME_TYPE:
                entries.append(Folder.from_drive_file(item, parent_ids=[folder_id]))
            else:
                entries.append(Document.from_drive_file(item))
        return entries


__all__ = ["DOCUMENT_MIME_TYPE", "FOLDER_MIME_TYPE", "GoogleDocsClient"]
