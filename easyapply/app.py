from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import HTMLResponse, JSONResponse

from .config import ProfileConfigError, load_settings, load_user_profile
from .db.database import init_db, get_session
from .models.job_log import JobLog
from .core.recorder import OutcomeRecorder
from .core.scheduler import BatchScheduler

BASE_DIR = Path(__file__).resolve().parent
UI_DIR = BASE_DIR / "ui"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 初始化叙述日志表
    init_db()
    yield


app = FastAPI(title="EasyApply - Batch Application Filler", lifespan=lifespan)

# 请求处理层持有“批次运行中”状态
scheduler = BatchScheduler()


if UI_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(UI_DIR), html=True), name="static")


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """
    返回前端单页（URL 列表 + 自动提交开关）。
    """
    index_file = UI_DIR / "index.html"
    if not index_file.exists():
        return HTMLResponse("<h1>EasyApply UI not found</h1>", status_code=200)
    return HTMLResponse(index_file.read_text(encoding="utf-8"))


def _parse_urls(payload: dict) -> list[str]:
    raw = payload.get("urls")
    if not isinstance(raw, list):
        return []
    return [str(u).strip() for u in raw if u is not None and str(u).strip()]


@app.post("/jobs")
def start_batch(payload: dict):
    """
    接收一批 URL 并在后台顺序处理。

    - 空列表 → 400
    - 已有批次运行 → 409
    - 个人资料缺少必填项 → 500，且不会启动批次
    """
    urls = _parse_urls(payload)
    if not urls:
        return JSONResponse({"ok": False, "error": "No URLs provided"}, status_code=400)
    if scheduler.is_running:
        return JSONResponse(
            {"ok": False, "error": "Batch already running. Try again later."},
            status_code=409,
        )

    try:
        profile = load_user_profile()
    except ProfileConfigError as e:
        return JSONResponse({"ok": False, "error": str(e)}, status_code=500)

    auto_submit = bool(payload.get("autoSubmit", False))
    if not scheduler.try_start(urls, auto_submit=auto_submit, profile=profile):
        return JSONResponse(
            {"ok": False, "error": "Batch already running. Try again later."},
            status_code=409,
        )
    print(f"[easyapply] Received batch: {len(urls)} URL(s)")
    return {"ok": True, "count": len(urls)}


@app.get("/api/batch/status")
def batch_status():
    """查询是否有批次正在运行。"""
    return {"ok": True, "running": scheduler.is_running}


@app.get("/api/records")
def list_records(limit: int = 50):
    """返回最近的结果记录（CSV，最新在前）。"""
    settings = load_settings()
    rows = OutcomeRecorder(settings.csv_path).read_rows(limit=limit)
    return {"ok": True, "records": rows}


@app.get("/api/jobs/{job_id}/logs")
def get_job_logs(job_id: str):
    """返回指定 job 指纹的叙述日志。"""
    with get_session() as session:
        logs = (
            session.query(JobLog)
            .filter(JobLog.job_id == job_id)
            .order_by(JobLog.create_time.asc(), JobLog.id.asc())
            .all()
        )
        return [log.to_dict() for log in logs]


def main() -> None:
    import uvicorn

    uvicorn.run("easyapply.app:app", host="127.0.0.1", port=3000)


if __name__ == "__main__":
    main()
