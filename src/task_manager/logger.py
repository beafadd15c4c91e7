"""
ロギング設定モジュール
"""

import logging
from pathlib import Path
from typing import List, Optional


def setup_logger(log_level: str = "INFO", log_file: Optional[str] = "logs/tasks.log") -> None:
    """
    ロガーのセットアップ

    Args:
        log_level: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: ログファイルのパス（Noneならコンソールのみ）
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        # ログディレクトリの作成
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )
