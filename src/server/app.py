from __future__ import annotations
import logging
import os
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import BackgroundTasks, FastAPI, File, HTTPException, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from shopify_translations.config import StitchOptions
from shopify_translations.transform import transform, write_output
from . import settings as app_settings


log = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = Path(os.getenv("STITCH_DATA_DIR") or ROOT / "data")
UPLOADS = DATA_DIR / "uploads"
RESULTS = DATA_DIR / "results"
UPLOADS.mkdir(parents=True, exist_ok=True)
RESULTS.mkdir(parents=True, exist_ok=True)

app = FastAPI(title="Shopify translation stitcher", version="0.1.0")
app_settings.init_settings(DATA_DIR / "settings.json")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus:
    queued = "queued"
    running = "running"
    succeeded = "succeeded"
    failed = "failed"


class Job(BaseModel):
    id: str
    kind: str
    status: str
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    params: Dict
    result_path: Optional[str] = None
    error: Optional[str] = None
    counters: Dict = {}


JOBS: Dict[str, Job] = {}


class FileInfo(BaseModel):
    id: str
    name: str
    path: str
    size: int
    created_at: datetime


FILES: Dict[str, FileInfo] = {}


class StitchRequest(BaseModel):
    target_file_id: str
    source_file_id: Optional[str] = None
    locale: Optional[str] = None
    fill_translations: Optional[bool] = None
    replace_size_charts: Optional[bool] = None
    title_case: Optional[bool] = None
    loose_marker: Optional[bool] = None


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/settings")
def get_settings() -> Dict:
    return app_settings.get_settings()


@app.post("/settings")
def post_settings(opts: StitchOptions) -> Dict:
    app_settings.save_settings(opts.model_dump())
    return app_settings.get_settings()


@app.post("/files", response_model=FileInfo)
async def upload_file(file: UploadFile = File(...)):
    fid = uuid.uuid4().hex
    dest = UPLOADS / f"{fid}_{Path(file.filename or 'upload.csv').name}"
    with dest.open("wb") as out:
        shutil.copyfileobj(file.file, out)
    info = FileInfo(id=fid, name=file.filename or dest.name, path=str(dest), size=dest.stat().st_size, created_at=_now())
    FILES[fid] = info
    return info


@app.get("/files", response_model=List[FileInfo])
def list_files() -> List[FileInfo]:
    return list(FILES.values())


@app.post("/jobs/stitch", response_model=Job)
def create_stitch_job(req: StitchRequest, bg: BackgroundTasks):
    if req.target_file_id not in FILES:
        raise HTTPException(404, "target_file_id not found")
    if req.source_file_id and req.source_file_id not in FILES:
        raise HTTPException(404, "source_file_id not found")
    job_id = uuid.uuid4().hex
    job = Job(
        id=job_id,
        kind="stitch",
        status=JobStatus.queued,
        created_at=_now(),
        params=req.model_dump(),
    )
    JOBS[job_id] = job

    def run():
        j = JOBS[job_id]
        j.status = JobStatus.running
        j.started_at = _now()
        try:
            values = app_settings.get_settings()
            values.update({k: v for k, v in req.model_dump().items() if v is not None and k in values})
            opts = StitchOptions(**values)
            target = Path(FILES[req.target_file_id].path)
            source = Path(FILES[req.source_file_id].path) if req.source_file_id else None
            lines, stats = transform(target, source, opts)
            out = RESULTS / f"{job_id}.csv"
            write_output(out, lines)
            j.counters = stats.as_dict()
            j.result_path = str(out)
            j.status = JobStatus.succeeded
        except Exception as e:
            log.exception(f"stitch job {job_id} failed")
            j.status = JobStatus.failed
            j.error = str(e)
        finally:
            j.finished_at = _now()

    bg.add_task(run)
    return job


@app.get("/jobs/{job_id}", response_model=Job)
def get_job(job_id: str) -> Job:
    if job_id in JOBS:
        return JOBS[job_id]
    raise HTTPException(404, "job not found")


@app.get("/jobs/{job_id}/download")
def download_job(job_id: str):
    job = JOBS.get(job_id)
    if not job:
        raise HTTPException(404, "job not found")
    if job.status != JobStatus.succeeded or not job.result_path:
        raise HTTPException(400, "job not completed or no result available")
    return FileResponse(path=job.result_path, filename=f"translations_{job_id}.csv", media_type="text/csv")
