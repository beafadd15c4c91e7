"""タスク管理のカスタム例外定義

HTTP層はstatus_codeを見てレスポンスを組み立てる。
"""


class TaskError(Exception):
    """タスク管理の基底例外"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskError):
    """入力値が不正（400）"""

    status_code = 400


class NotFoundError(TaskError):
    """指定IDのタスクが存在しない（404）"""

    status_code = 404


class StorageError(TaskError):
    """永続化層の予期しない失敗（500）"""

    status_code = 500
