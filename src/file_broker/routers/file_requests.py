import asyncio
import base64
import contextlib
import logging
from typing import Awaitable

from fastapi import (
    APIRouter,
    FastAPI,
    HTTPException,
    Path,
    Request,
    WebSocket,
    WebSocketDisconnect,
    status
)

from file_broker.adapters.file_store import FileStoreFactory
from file_broker.errors import CallerContractError, FileStoreError
from file_broker.orchestrators import FileRequestBroker
from file_broker.reporter import ReportFn
from file_broker.schemas import (
    FileRecord,
    FileRequestMessage,
    GetFilesResponse,
    NotebookInfo,
    RequestType,
)
from file_broker.settings import Settings
from file_broker.state import NotebookStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_notebook_broker(app: FastAPI, notebook_id: str) -> FileRequestBroker:
    """Return the broker for a notebook, seeding its state from the store on first use."""
    brokers = app.state.brokers
    if notebook_id not in brokers:
        settings: Settings = app.state.settings
        file_store = FileStoreFactory.get_file_store(notebook_id, settings)
        files = [FileRecord(**f) for f in await file_store.list_files()]
        store = NotebookStore(NotebookInfo(notebook_id=notebook_id, files=files))
        brokers.setdefault(
            notebook_id, FileRequestBroker(file_store, store.get_state, store.dispatch)
        )
    return brokers[notebook_id]


def _encode_body(body: dict) -> dict:
    """Make a report body JSON-safe: binary payloads travel base64-encoded."""
    response = body.get("response")
    if isinstance(response, bytes):
        return {**body, "response": base64.b64encode(response).decode("ascii")}
    return body


def _start_request(broker: FileRequestBroker, request: FileRequestMessage, report: ReportFn) -> Awaitable[None]:
    if request.request_type == RequestType.LOAD_FILE.value:
        operation = broker.load_file
    elif request.request_type == RequestType.SAVE_FILE.value:
        operation = broker.save_file
    elif request.request_type == RequestType.DELETE_FILE.value:
        operation = broker.delete_file
    else:
        raise ValueError(f"Unknown requestType: {request.request_type}")

    return operation(request.filename, request.file_request_id, request.request_options, report)


async def _send_messages(websocket: WebSocket, outgoing: asyncio.Queue) -> None:
    while True:
        message = await outgoing.get()
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.error(f"Could not deliver message for request {message.get('fileRequestID')}: {str(e)}")
        finally:
            outgoing.task_done()


@router.websocket("/notebooks/{notebook_id}/file-requests")
async def file_requests_channel(websocket: WebSocket, notebook_id: str):
    """
    Message channel between the eval frame and the broker.

    Every incoming request runs as its own task, so several can be in flight
    at once. Outcomes are sent back as `{"type": kind, ...body}` in the order
    they settle. A malformed request closes the channel with a policy
    violation and is never answered.
    """
    await websocket.accept()
    try:
        broker = await get_notebook_broker(websocket.app, notebook_id)
    except FileStoreError as e:
        logger.error(f"Could not open notebook {notebook_id}: {str(e)}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e)[:120])
        return

    outgoing: asyncio.Queue = asyncio.Queue()

    def report(kind: str, body: dict) -> None:
        outgoing.put_nowait({"type": kind, **_encode_body(body)})

    sender = asyncio.create_task(_send_messages(websocket, outgoing))
    pending = set()
    violation = None

    def request_done(task: asyncio.Future) -> None:
        pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"File request on notebook {notebook_id} failed: {str(task.exception())}")

    try:
        while violation is None:
            try:
                message = await websocket.receive_json()
                request = FileRequestMessage.model_validate(message)
                handle = _start_request(broker, request, report)
            except (CallerContractError, KeyError, ValueError) as e:
                violation = str(e)
                logger.error(f"Rejected file request on notebook {notebook_id}: {violation}")
                break

            task = asyncio.ensure_future(handle)
            pending.add(task)
            task.add_done_callback(request_done)
    except WebSocketDisconnect:
        logger.info(f"Eval frame disconnected from notebook {notebook_id}")
    finally:
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await outgoing.join()
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender

    if violation is not None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=violation[:120])


@router.get("/notebooks/{notebook_id}/files", response_model=GetFilesResponse)
async def get_files(
    request: Request,
    notebook_id: str = Path(..., description="The notebook whose files are listed"),
):
    """
    List the files currently known to a notebook.

    Returns:
        GetFilesResponse: The notebook's file collection
    """
    try:
        broker = await get_notebook_broker(request.app, notebook_id)
    except FileStoreError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return GetFilesResponse(notebook_id=notebook_id, files=broker.get_state().files)
