from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ...config import Settings
from ...core.errors import (
    ConfirmationRequiredError,
    DrawInProgressError,
    EmptyInputError,
    ExternalCallFailure,
    NamingInProgressError,
)
from .schemas import (
    AddTextRequest,
    AllowRepeatRequest,
    CreateWorkspaceRequest,
    FileContentRequest,
    GroupRequest,
    NamingRequest,
)
from .service import Workspace, WorkspaceConfig, WorkspaceManager

__all__ = ["create_workspace_router"]


class _WorkspaceController:
    def __init__(self, manager: WorkspaceManager, settings: Settings) -> None:
        self.manager = manager
        self.settings = settings

    # ------------------------------------------------------------------ helpers
    def _require(self, sid: str) -> Workspace:
        try:
            return self.manager.get(sid)
        except KeyError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc

    def _state(self, workspace: Workspace, *, code: int = status.HTTP_200_OK) -> JSONResponse:
        return JSONResponse(workspace.snapshot().to_dict(), status_code=code)

    def _conflict(self, exc: Exception) -> HTTPException:
        return HTTPException(status.HTTP_409_CONFLICT, str(exc))

    # ------------------------------------------------------------------ actions
    def create(self, body: CreateWorkspaceRequest) -> JSONResponse:
        config = WorkspaceConfig.from_settings(
            self.settings,
            allow_repeat=body.allow_repeat,
            group_size=body.group_size,
            reveal_seconds=body.reveal_seconds,
            seed=body.seed,
        )
        sid = self.manager.create(config)
        return JSONResponse({"workspace": sid}, status_code=status.HTTP_201_CREATED)

    def show(self, sid: str) -> JSONResponse:
        return self._state(self._require(sid))

    def close(self, sid: str) -> JSONResponse:
        try:
            self.manager.close(sid)
        except KeyError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
        return JSONResponse({"closed": sid})

    def add_text(self, sid: str, body: AddTextRequest) -> JSONResponse:
        workspace = self._require(sid)
        workspace.add_text(body.text)
        return self._state(workspace)

    def upload(self, sid: str, body: FileContentRequest) -> JSONResponse:
        workspace = self._require(sid)
        workspace.add_file_content(body.content)
        return self._state(workspace)

    async def extract(self, sid: str, body: AddTextRequest) -> JSONResponse:
        workspace = self._require(sid)
        try:
            await workspace.extract_and_add(body.text)
        except ExternalCallFailure as exc:
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, f"AI parsing failed: {exc}") from exc
        return self._state(workspace)

    def remove(self, sid: str, pid: str) -> JSONResponse:
        workspace = self._require(sid)
        try:
            workspace.remove_participant(pid)
        except KeyError as exc:
            raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
        return self._state(workspace)

    def clear(self, sid: str, confirm: bool) -> JSONResponse:
        workspace = self._require(sid)
        try:
            workspace.clear_participants(confirm=confirm)
        except ConfirmationRequiredError as exc:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
        return self._state(workspace)

    def regroup(self, sid: str, body: GroupRequest) -> JSONResponse:
        workspace = self._require(sid)
        try:
            workspace.regroup(body.size)
        except EmptyInputError as exc:
            raise self._conflict(exc) from exc
        return JSONResponse({"groups": [g.to_dict() for g in workspace.group_payloads()]})

    async def name_groups(self, sid: str, body: NamingRequest) -> JSONResponse:
        workspace = self._require(sid)
        try:
            await workspace.name_groups(body.theme)
        except (EmptyInputError, NamingInProgressError) as exc:
            raise self._conflict(exc) from exc
        return JSONResponse({"groups": [g.to_dict() for g in workspace.group_payloads()]})

    def lottery(self, sid: str) -> JSONResponse:
        return JSONResponse(self._require(sid).lottery_payload().to_dict())

    def draw(self, sid: str) -> JSONResponse:
        workspace = self._require(sid)
        try:
            workspace.start_draw()
        except (EmptyInputError, DrawInProgressError) as exc:
            raise self._conflict(exc) from exc
        return JSONResponse(workspace.lottery_payload().to_dict(), status_code=status.HTTP_202_ACCEPTED)

    def allow_repeat(self, sid: str, body: AllowRepeatRequest) -> JSONResponse:
        workspace = self._require(sid)
        workspace.set_allow_repeat(body.allow_repeat)
        return JSONResponse(workspace.lottery_payload().to_dict())

    def clear_history(self, sid: str, confirm: bool) -> JSONResponse:
        workspace = self._require(sid)
        try:
            workspace.clear_history(confirm=confirm)
        except ConfirmationRequiredError as exc:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
        return JSONResponse(workspace.lottery_payload().to_dict())


def create_workspace_router(manager: WorkspaceManager, settings: Settings | None = None) -> APIRouter:
    controller = _WorkspaceController(manager, settings or Settings())
    router = APIRouter(prefix="/api/v1/workspace", tags=["workspace"])

    @router.post("")
    async def create_workspace(body: CreateWorkspaceRequest | None = None) -> JSONResponse:
        return controller.create(body or CreateWorkspaceRequest())

    @router.get("/{sid}")
    async def get_workspace(sid: str) -> JSONResponse:
        return controller.show(sid)

    @router.delete("/{sid}")
    async def close_workspace(sid: str) -> JSONResponse:
        return controller.close(sid)

    @router.post("/{sid}/participants")
    async def add_participants(sid: str, body: AddTextRequest) -> JSONResponse:
        return controller.add_text(sid, body)

    @router.post("/{sid}/participants/upload")
    async def upload_participants(sid: str, body: FileContentRequest) -> JSONResponse:
        return controller.upload(sid, body)

    @router.post("/{sid}/participants/extract")
    async def extract_participants(sid: str, body: AddTextRequest) -> JSONResponse:
        return await controller.extract(sid, body)

    @router.delete("/{sid}/participants/{pid}")
    async def remove_participant(sid: str, pid: str) -> JSONResponse:
        return controller.remove(sid, pid)

    @router.delete("/{sid}/participants")
    async def clear_participants(sid: str, confirm: bool = Query(default=False)) -> JSONResponse:
        return controller.clear(sid, confirm)

    @router.post("/{sid}/groups")
    async def regroup(sid: str, body: GroupRequest) -> JSONResponse:
        return controller.regroup(sid, body)

    @router.post("/{sid}/groups/names")
    async def name_groups(sid: str, body: NamingRequest | None = None) -> JSONResponse:
        return await controller.name_groups(sid, body or NamingRequest())

    @router.get("/{sid}/lottery")
    async def get_lottery(sid: str) -> JSONResponse:
        return controller.lottery(sid)

    @router.post("/{sid}/lottery/draw")
    async def draw(sid: str) -> JSONResponse:
        return controller.draw(sid)

    @router.put("/{sid}/lottery/repeat")
    async def set_repeat(sid: str, body: AllowRepeatRequest) -> JSONResponse:
        return controller.allow_repeat(sid, body)

    @router.delete("/{sid}/lottery/history")
    async def clear_history(sid: str, confirm: bool = Query(default=False)) -> JSONResponse:
        return controller.clear_history(sid, confirm)

    return router
