"""
静态页面：GET / 返回 index.html，文件不存在时 404
"""

from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

router = APIRouter(tags=["页面"])


@router.get("/", include_in_schema=False)
async def index(request: Request):
    index_file = Path(request.app.state.settings.INDEX_FILE)
    if not index_file.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(index_file, media_type="text/html")
