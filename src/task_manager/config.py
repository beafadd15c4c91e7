"""
設定管理モジュール

関連クラス:
  - server.app.create_app: この設定からアプリケーションを構築
  - tasks.repository.TaskRepository: database.path を使用
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class ServerConfig:
    """HTTPサーバー設定"""

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    api_prefix: str = "/api"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class DatabaseConfig:
    """タスクストア設定"""

    path: str = ":memory:"
    seed_sample_tasks: bool = True


@dataclass
class LogConfig:
    """ログ設定"""

    level: str = "INFO"
    file: Optional[str] = "logs/tasks.log"


@dataclass
class Config:
    """アプリケーション設定クラス"""

    server: ServerConfig = None  # type: ignore
    database: DatabaseConfig = None  # type: ignore
    log: LogConfig = None  # type: ignore

    def __post_init__(self):
        """デフォルト値の初期化"""
        if self.server is None:
            self.server = ServerConfig()
        if self.database is None:
            self.database = DatabaseConfig()
        if self.log is None:
            self.log = LogConfig()

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "Config":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス（省略時はconfig/app_config.yamlを使用）

        Returns:
            Config: 設定インスタンス。ファイルが無ければデフォルト値
        """
        if config_path is None:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "app_config.yaml"

        yaml_data: Dict[str, Any] = {}
        if Path(config_path).exists():
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}

        server_data = yaml_data.get("server", {})
        database_data = yaml_data.get("database", {})
        log_data = yaml_data.get("log", {})

        defaults = ServerConfig()
        return cls(
            server=ServerConfig(
                host=server_data.get("host", defaults.host),
                port=int(server_data.get("port", defaults.port)),
                reload=bool(server_data.get("reload", defaults.reload)),
                api_prefix=server_data.get("api_prefix", defaults.api_prefix),
                cors_origins=list(server_data.get("cors_origins", defaults.cors_origins)),
            ),
            database=DatabaseConfig(
                # 環境変数が最優先（テストやコンテナでの差し替え用）
                path=os.getenv("TASKS_DB_PATH") or database_data.get("path", ":memory:"),
                seed_sample_tasks=bool(database_data.get("seed_sample_tasks", True)),
            ),
            log=LogConfig(
                level=log_data.get("level", "INFO"),
                file=log_data.get("file", "logs/tasks.log"),
            ),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """環境変数から設定を読み込む"""
        origins = os.getenv("TASKS_CORS_ORIGINS", "*")
        return cls(
            server=ServerConfig(
                host=os.getenv("TASKS_HOST", "0.0.0.0"),
                port=int(os.getenv("TASKS_PORT", "8000")),
                reload=os.getenv("TASKS_RELOAD", "false").lower() == "true",
                api_prefix=os.getenv("TASKS_API_PREFIX", "/api"),
                cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            ),
            database=DatabaseConfig(
                path=os.getenv("TASKS_DB_PATH", ":memory:"),
                seed_sample_tasks=os.getenv("TASKS_SEED_SAMPLE", "true").lower() == "true",
            ),
            log=LogConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                file=os.getenv("LOG_FILE") or None,
            ),
        )
