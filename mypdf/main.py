import logging
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import ALLOWED_ORIGINS, EDITED_PREFIX, MERGED_FILENAME
from .document import check_upload, run_sync
from .errors import InputError, MergeInputError
from .merge import merge_documents
from .models import parse_action_list
from .mutation import apply_actions

logger = logging.getLogger(__name__)

app = FastAPI(title="MyPDF")
app.add_middleware(CORSMiddleware, allow_origins=ALLOWED_ORIGINS, allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    logger.info("Rejected %s: %s", request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=400)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [{"field": ".".join(str(part) for part in err["loc"][1:]) or None, "message": err["msg"]}
               for err in exc.errors()]
    logger.info("Rejected %s: %d invalid field(s)", request.url.path, len(details))
    return JSONResponse({"error": "Invalid request", "details": details}, status_code=400)


def _internal_error() -> JSONResponse:
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    check_upload(content, file.filename)
    return content


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/pdf/apply")
async def apply_pdf(file: UploadFile | None = File(None), actions: str | None = Form(None)):
    if file is None:
        raise InputError("Missing file", [{"field": "file", "message": "Field required"}])
    if actions is None:
        raise InputError("Missing actions", [{"field": "actions", "message": "Field required"}])
    content = await _read_upload(file)
    action_list = parse_action_list(actions)
    try:
        out = await run_sync(apply_actions, content, action_list)
    except InputError:
        raise
    except Exception:
        logger.exception("Failed to apply %d actions to %s", len(action_list), file.filename)
        return _internal_error()
    return _pdf_response(out, EDITED_PREFIX + file.filename)


@app.post("/api/pdf/merge")
async def merge_pdfs(files: list[UploadFile] | None = File(None)):
    files = files or []
    if len(files) < 2:
        raise MergeInputError("At least 2 PDF files are required for merging",
                              [{"field": "files", "message": f"Got {len(files)} file(s)"}])
    sources = [await _read_upload(f) for f in files]
    try:
        out = await run_sync(merge_documents, sources)
    except InputError:
        raise
    except Exception:
        logger.exception("Failed to merge %d files", len(sources))
        return _internal_error()
    return _pdf_response(out, MERGED_FILENAME)


def run(host: str = "127.0.0.1", port: int = 3000) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=host, port=port)
