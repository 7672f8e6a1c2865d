"""FastAPI main application for the Attendance Analyzer."""

import os
import csv
import logging
import traceback
from io import StringIO
from typing import Any, Iterable

from fastapi import FastAPI, File, UploadFile, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from attendance.advice import build_action_message, build_tips, subject_breakdown
from attendance.analyzer import analyze
from attendance.errors import AttendanceError
from attendance.models import AnalyzeRequest, AnalyzeResponse, ErrorResponse
from attendance.parsers import load_subjects_file

# Load environment variables
load_dotenv()

# Configuration
ALLOW_ORIGINS = os.getenv('ALLOW_ORIGINS', '*').split(',')
DEBUG = os.getenv('DEBUG', 'False').lower() in ('1', 'true', 'yes')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
MAX_UPLOAD_SIZE_MB = int(os.getenv('MAX_UPLOAD_SIZE_MB', '10'))
MAX_UPLOAD_SIZE = MAX_UPLOAD_SIZE_MB * 1024 * 1024

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Attendance Analyzer", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    """Rejected entries are a normal outcome: report which check failed."""
    logger.warning("Rejected attendance input: %s", exc)
    body = ErrorResponse(detail=str(exc), type=type(exc).__name__, subject=exc.subject)
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions and return JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
    """Handle validation errors and return JSON."""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(), "body": exc.body}
    )


# Only reached for exceptions the handlers above do not cover
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and return JSON."""
    logger.exception("Unhandled error on %s", request.url.path)
    error_detail = str(exc)
    if DEBUG:
        error_detail = f"{str(exc)}\n\n{traceback.format_exc()}"

    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Internal server error: {error_detail}",
            "type": type(exc).__name__
        }
    )


def build_response(raw_entries: Iterable[Any]) -> AnalyzeResponse:
    """Run the analysis and attach the texts the results view renders."""
    result = analyze(raw_entries)

    logger.info(
        "Analyzed %d subjects: %s at %.2f%% (%d %s)",
        len(result.subjects), result.status.value, result.overall_percentage,
        result.action_number, result.action_label,
    )

    return AnalyzeResponse(
        success=True,
        message=f"Successfully analyzed {len(result.subjects)} subjects",
        result=result,
        action_message=build_action_message(result),
        breakdown=subject_breakdown(result),
        tips=build_tips(result),
    )


@app.get("/", response_class=HTMLResponse)
async def root():
    """Serve the main HTML page."""
    html_path = os.path.join(os.path.dirname(__file__), 'static', 'index.html')
    if os.path.exists(html_path):
        with open(html_path, 'r', encoding='utf-8') as f:
            return HTMLResponse(content=f.read())
    return HTMLResponse(content="<h1>Attendance Analyzer</h1><p>Static files not found. POST subjects to /analyze.</p>")


@app.get("/health")
async def health_check():
    """Health check endpoint to test server connectivity."""
    return JSONResponse(content={"status": "ok", "message": "Server is running"})


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze_subjects(request: AnalyzeRequest):
    """Analyze subject rows submitted as JSON."""
    return build_response(request.subjects)


@app.post("/upload", response_model=AnalyzeResponse)
async def upload_file(file: UploadFile = File(...)):
    """Analyze subject rows from an uploaded CSV or Excel file."""
    file_bytes = await file.read()
    if len(file_bytes) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_UPLOAD_SIZE_MB}MB"
        )

    try:
        entries = load_subjects_file(file_bytes, file.filename)
    except ValueError as e:
        logger.warning("Could not load %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))

    return build_response(entries)


@app.post("/analyze.csv")
async def download_csv(request: AnalyzeRequest):
    """Analyze subject rows and return the breakdown as CSV."""
    result = analyze(request.subjects)

    output = StringIO()
    writer = csv.writer(output)

    writer.writerow(['Subject', 'Classes Held', 'Attended', 'Attendance %', 'Status'])
    for line in subject_breakdown(result):
        writer.writerow([
            line.name,
            line.held,
            line.attended,
            f"{line.percentage:.1f}",
            line.label,
        ])
    writer.writerow([
        'TOTAL',
        result.total_held,
        result.total_attended,
        f"{result.overall_percentage:.2f}",
        result.status.value,
    ])
    writer.writerow([result.action_label, result.action_number])

    output.seek(0)

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": "attachment; filename=attendance_analysis.csv"
        }
    )


# Mount static files
static_path = os.path.join(os.path.dirname(__file__), 'static')
if os.path.exists(static_path):
    app.mount("/static", StaticFiles(directory=static_path), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv('HOST', '0.0.0.0'), port=int(os.getenv('PORT', '8000')))
