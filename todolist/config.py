"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量

默认值即单机部署时的固定常量（tasks.json / :8080），环境变量仅用于覆盖。
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── 持久化 ──
    TASKS_FILE: str = "tasks.json"  # 任务列表落盘文件（JSON 数组）
    INDEX_FILE: str = "index.html"  # GET / 返回的静态页面

    # ── 服务 ──
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8080

    # ── 控制台 ──
    CONSOLE_ENABLED: bool = False  # true 时服务后台运行，前台进入菜单控制台

    # ── 应用 ──
    ENV: str = "development"  # development | production
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "todolist"


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()
