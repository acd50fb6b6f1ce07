"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work to
the client's services and renders results and failures through the
UserInterface. Every handler returns the process exit code.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from streamtape.client import StreamTape
from streamtape.domain.errors import ErrorKind, RemoteUploadTimeout, StreamTapeError
from streamtape.domain.interfaces.user_interface import UserInterface
from streamtape.domain.models.common import (
    DownloadTicketToken,
    FilePath,
    RemoteUploadId,
    RemoteUploadStatus,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

ERROR_TITLES = {
    ErrorKind.AUTHENTICATION: "Authentication Error",
    ErrorKind.VALIDATION: "Validation Error",
    ErrorKind.RATE_LIMIT: "Rate Limit Exceeded",
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.API_REQUEST: "API Request Error",
    ErrorKind.NETWORK: "Network Error",
    ErrorKind.GENERIC: "Error",
}


class CommandHandler:
    """Handles incoming commands and delegates to the client's services."""

    def __init__(self, client: StreamTape, ui: UserInterface):
        self.client = client
        self.ui = ui

    def _display_api_error(self, command: str, error: StreamTapeError) -> None:
        message = error.message
        if error.kind == ErrorKind.API_REQUEST and error.status is not None:
            message = f"{message} (status {error.status})"
        if command == "link" and error.kind == ErrorKind.VALIDATION:
            message = f"{message}\nThe server may require a captcha; retry with --captcha <response>."
        self.ui.display_error(message, title=ERROR_TITLES[error.kind])

    async def _run(self, command: str, action: Callable[[], Awaitable[None]]) -> int:
        """Runs one command and turns failures into an error display and exit code."""
        logger.info(f"Handling '{command}' command.")
        try:
            await action()
        except RemoteUploadTimeout as e:
            logger.warning(f"'{command}' timed out: {e}")
            self.ui.display_error(str(e), title="Timeout")
            return EXIT_FAILURE
        except StreamTapeError as e:
            logger.error(f"'{command}' failed: {e!r}")
            self._display_api_error(command, e)
            return EXIT_FAILURE
        except (FileNotFoundError, PermissionError) as e:
            logger.error(f"'{command}' failed: {e}")
            self.ui.display_error(str(e))
            return EXIT_FAILURE
        return EXIT_OK

    # --- Account ---

    async def handle_account(self) -> int:
        async def action() -> None:
            info = await self.client.account.get_account_info()
            self.ui.display_record("Account", dict(info))

        return await self._run("account", action)

    # --- Files and folders ---

    async def handle_info(self, file_ids: List[str]) -> int:
        async def action() -> None:
            infos = await self.client.file.get_file_info(file_ids)
            rows = [
                [file_id, info.get("name"), info.get("size"), info.get("type"),
                 info.get("converted"), info.get("status")]
                for file_id, info in (infos or {}).items()
            ]
            self.ui.display_table("Files", ["Id", "Name", "Size", "Type", "Converted", "Status"], rows)

        return await self._run("info", action)

    async def handle_list_folder(self, folder_id: Optional[str]) -> int:
        async def action() -> None:
            content = await self.client.file.list_folder(folder_id)
            folders = [[folder.get("id"), folder.get("name")] for folder in content.get("folders", [])]
            files = [
                [entry.get("linkid"), entry.get("name"), entry.get("size"), entry.get("downloads"), entry.get("link")]
                for entry in content.get("files", [])
            ]
            self.ui.display_table("Folders", ["Id", "Name"], folders)
            self.ui.display_table("Files", ["Id", "Name", "Size", "Downloads", "Link"], files)

        return await self._run("ls", action)

    async def handle_create_folder(self, name: str, parent_id: Optional[str]) -> int:
        async def action() -> None:
            folder_id = await self.client.file.create_folder(name, parent_id)
            self.ui.display_output(folder_id)

        return await self._run("mkdir", action)

    async def _confirm(self, command: str, description: str, operation: Callable[[], Awaitable[bool]]) -> int:
        async def action() -> None:
            if await operation():
                self.ui.display_info(description)
            else:
                self.ui.display_warning(f"The server did not confirm: {description}")

        return await self._run(command, action)

    async def handle_rename_folder(self, folder_id: str, new_name: str) -> int:
        return await self._confirm(
            "rename-folder",
            f"Folder {folder_id} renamed to '{new_name}'.",
            lambda: self.client.file.rename_folder(folder_id, new_name),
        )

    async def handle_delete_folder(self, folder_id: str) -> int:
        return await self._confirm(
            "rmdir", f"Folder {folder_id} deleted.", lambda: self.client.file.delete_folder(folder_id)
        )

    async def handle_rename_file(self, file_id: str, new_name: str) -> int:
        return await self._confirm(
            "rename",
            f"File {file_id} renamed to '{new_name}'.",
            lambda: self.client.file.rename_file(file_id, new_name),
        )

    async def handle_move_file(self, file_id: str, folder_id: str) -> int:
        return await self._confirm(
            "mv",
            f"File {file_id} moved to folder {folder_id}.",
            lambda: self.client.file.move_file(file_id, folder_id),
        )

    async def handle_delete_file(self, file_id: str) -> int:
        return await self._confirm(
            "rm", f"File {file_id} deleted.", lambda: self.client.file.delete_file(file_id)
        )

    async def handle_converts(self, failed: bool) -> int:
        async def action() -> None:
            if failed:
                converts = await self.client.file.get_failed_converts()
            else:
                converts = await self.client.file.get_running_converts()
            rows = [
                [c.get("linkid"), c.get("name"), c.get("status"), c.get("progress"), c.get("retries")]
                for c in converts or []
            ]
            title = "Failed Conversions" if failed else "Running Conversions"
            self.ui.display_table(title, ["Id", "Name", "Status", "Progress", "Retries"], rows)

        return await self._run("converts", action)

    async def handle_thumbnail(self, file_id: str) -> int:
        async def action() -> None:
            self.ui.display_output(await self.client.file.get_thumbnail(file_id))

        return await self._run("thumbnail", action)

    # --- Downloads ---

    async def handle_ticket(self, file_id: str) -> int:
        async def action() -> None:
            ticket = await self.client.download.get_download_ticket(file_id)
            self.ui.display_record("Download Ticket", dict(ticket))

        return await self._run("ticket", action)

    async def handle_link(self, file_id: str, ticket: Optional[str], captcha: Optional[str]) -> int:
        """Prints a direct download link, requesting and waiting for a ticket unless one is given."""
        async def action() -> None:
            if ticket:
                link = await self.client.download.get_download_link(file_id, DownloadTicketToken(ticket), captcha)
            else:
                link = await self.client.download.get_direct_download_link(file_id, captcha)
            self.ui.display_output(link["url"])

        return await self._run("link", action)

    # --- Uploads ---

    async def handle_upload(
        self,
        path: str,
        folder_id: Optional[str],
        compute_hash: bool,
        http_only: bool,
    ) -> int:
        """Uploads a local file, showing a progress bar while the body is sent."""
        async def action() -> None:
            sha256 = None
            if compute_hash:
                sha256 = await self.client.upload.file_source.sha256(FilePath(path))
                logger.debug(f"SHA-256 of {path}: {sha256}")

            self.ui.start_progress(f"Uploading {path}")
            try:
                file_id = await self.client.upload.upload_file(
                    FilePath(path),
                    folder_id=folder_id,
                    sha256=sha256,
                    http_only=http_only,
                    on_progress=self.ui.update_progress,
                )
            finally:
                self.ui.stop_progress()
            self.ui.display_output(file_id)

        return await self._run("upload", action)

    async def handle_remote_add(
        self,
        url: str,
        folder_id: Optional[str],
        name: Optional[str],
        headers: Optional[str],
    ) -> int:
        async def action() -> None:
            remote = await self.client.upload.add_remote_upload(url, folder_id=folder_id, headers=headers, name=name)
            self.ui.display_output(remote["id"])

        return await self._run("remote-add", action)

    async def handle_remote_remove(self, upload_id: str) -> int:
        return await self._confirm(
            "remote-rm",
            f"Remote upload {upload_id} removed.",
            lambda: self.client.upload.remove_remote_upload(RemoteUploadId(upload_id)),
        )

    async def handle_remote_status(self, upload_id: str) -> int:
        async def action() -> None:
            statuses = await self.client.upload.check_remote_upload_status(RemoteUploadId(upload_id))
            rows = [
                [status_id, s.get("status"), s.get("bytes_loaded"), s.get("bytes_total"), s.get("url") or None]
                for status_id, s in (statuses or {}).items()
            ]
            self.ui.display_table("Remote Uploads", ["Id", "Status", "Loaded", "Total", "Url"], rows)

        return await self._run("remote-status", action)

    async def handle_remote_wait(self, upload_id: str, interval: float, timeout: float) -> int:
        """Polls a remote upload until it finishes; a failed upload exits non-zero."""
        failed = False

        def report(status: RemoteUploadStatus) -> None:
            logger.info(
                f"Remote upload {upload_id}: {status.get('status')} "
                f"({status.get('bytes_loaded')}/{status.get('bytes_total')} bytes)"
            )

        async def action() -> None:
            nonlocal failed
            final = await self.client.upload.wait_for_remote_upload(
                RemoteUploadId(upload_id), poll_interval=interval, timeout=timeout, on_progress=report
            )
            if final.get("status") == "error":
                failed = True
                self.ui.display_error(f"Remote upload {upload_id} failed on the server.", title="Remote Upload Failed")
            else:
                self.ui.display_output(str(final["url"]))

        exit_code = await self._run("remote-wait", action)
        return EXIT_FAILURE if failed else exit_code
