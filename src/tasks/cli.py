#!/usr/bin/env python3
"""
タスク管理CLI - タスクAPIサーバーを操作するコマンドラインクライアント

Usage:
    python -m src.tasks list [--search TEXT] [--status active|completed] [--priority high|medium|low] [--sort due_date|priority|created_at|completed] [--format json|text]
    python -m src.tasks add --title "タイトル" [--details "詳細"] [--priority high|medium|low] [--due-date YYYY-MM-DD]
    python -m src.tasks update --id ID [--title "新タイトル"] [--details "新詳細"] [--priority P] [--due-date D] [--clear-details] [--clear-priority] [--clear-due-date]
    python -m src.tasks complete --id ID
    python -m src.tasks delete --id ID
    python -m src.tasks get --id ID
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

import requests

from .client import TaskApiClient, TaskApiError
from .exceptions import ValidationError
from .models import UNSET, Priority, SortKey, StatusFilter

DEFAULT_API_URL = "http://localhost:8000/api"


def format_task_text(task: Dict[str, Any]) -> str:
    """タスクをテキスト形式で整形"""
    mark = "x" if task.get("completed") else " "
    priority = task.get("priority") or "-"
    due = task.get("due_date") or "未設定"
    details = (task.get("details") or "").strip() or "説明なし"
    return f"[{mark}] {task['id']} | {priority} | 期限: {due} | {task['title']} | {details}"


def _emit(payload: Any, output_format: str, text: str) -> None:
    if output_format == "json":
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(text)


def cmd_list(client: TaskApiClient, args: argparse.Namespace) -> int:
    """タスク一覧を表示"""
    items: List[Dict[str, Any]] = client.list_tasks(
        search=args.search,
        status=args.status,
        priority=args.priority,
        sort=args.sort,
    )
    if args.format == "json":
        print(json.dumps(items, ensure_ascii=False))
    elif not items:
        print("タスクは登録されていません。")
    else:
        for item in items:
            print(format_task_text(item))
    return 0


def cmd_add(client: TaskApiClient, args: argparse.Namespace) -> int:
    """新しいタスクを追加"""
    created = client.create_task(
        title=args.title,
        details=args.details,
        priority=args.priority,
        due_date=args.due_date,
    )
    _emit(created, args.format, f"追加しました: {format_task_text(created)}")
    return 0


def cmd_update(client: TaskApiClient, args: argparse.Namespace) -> int:
    """既存のタスクを更新（指定したフィールドのみ）"""

    def pick(value: Optional[str], clear: bool) -> Any:
        if clear:
            return None
        return UNSET if value is None else value

    updated = client.update_task(
        args.id,
        title=UNSET if args.title is None else args.title,
        details=pick(args.details, args.clear_details),
        priority=pick(args.priority, args.clear_priority),
        due_date=pick(args.due_date, args.clear_due_date),
    )
    _emit(updated, args.format, f"更新しました: {format_task_text(updated)}")
    return 0


def cmd_complete(client: TaskApiClient, args: argparse.Namespace) -> int:
    """完了状態を切り替える"""
    toggled = client.toggle_task(args.id)
    label = "完了にしました" if toggled.get("completed") else "未完了に戻しました"
    _emit(toggled, args.format, f"{label}: {format_task_text(toggled)}")
    return 0


def cmd_delete(client: TaskApiClient, args: argparse.Namespace) -> int:
    """タスクを削除"""
    result = client.delete_task(args.id)
    _emit(result, args.format, f"削除しました: ID {result.get('id', args.id)}")
    return 0


def cmd_get(client: TaskApiClient, args: argparse.Namespace) -> int:
    """特定のタスクを取得"""
    task = client.get_task(args.id)
    _emit(task, args.format, format_task_text(task))
    return 0


COMMANDS = {
    "list": cmd_list,
    "add": cmd_add,
    "update": cmd_update,
    "complete": cmd_complete,
    "delete": cmd_delete,
    "get": cmd_get,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="タスク管理CLI - タスクAPIサーバーのクライアント",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--api-url",
        default=os.getenv("TASKS_API_URL", DEFAULT_API_URL),
        help=f"APIのベースURL（デフォルト: {DEFAULT_API_URL}）",
    )
    parser.add_argument("--timeout", type=float, default=10, help="タイムアウト秒")

    format_parent = argparse.ArgumentParser(add_help=False)
    format_parent.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="出力フォーマット（デフォルト: text）",
    )
    id_parent = argparse.ArgumentParser(add_help=False)
    id_parent.add_argument("--id", type=int, required=True, help="対象タスクのID")

    priorities = [p.value for p in Priority]
    subparsers = parser.add_subparsers(dest="command", help="実行するコマンド", required=True)

    # list コマンド
    parser_list = subparsers.add_parser("list", parents=[format_parent], help="タスク一覧を表示")
    parser_list.add_argument("--search", help="タイトル・詳細の部分一致検索")
    parser_list.add_argument("--status", choices=[s.value for s in StatusFilter], help="完了状態で絞り込み")
    parser_list.add_argument("--priority", choices=priorities, help="優先度で絞り込み")
    parser_list.add_argument("--sort", choices=[s.value for s in SortKey], help="並び順")

    # add コマンド
    parser_add = subparsers.add_parser("add", parents=[format_parent], help="新しいタスクを追加")
    parser_add.add_argument("--title", required=True, help="タスクのタイトル")
    parser_add.add_argument("--details", help="タスクの詳細")
    parser_add.add_argument("--priority", choices=priorities, help="優先度")
    parser_add.add_argument("--due-date", help="期限日（YYYY-MM-DD形式）")

    # update コマンド
    parser_update = subparsers.add_parser(
        "update", parents=[format_parent, id_parent], help="既存のタスクを更新"
    )
    parser_update.add_argument("--title", help="新しいタイトル")
    parser_update.add_argument("--details", help="新しい詳細")
    parser_update.add_argument("--priority", choices=priorities, help="新しい優先度")
    parser_update.add_argument("--due-date", help="新しい期限日")
    parser_update.add_argument("--clear-details", action="store_true", help="詳細をクリア")
    parser_update.add_argument("--clear-priority", action="store_true", help="優先度をクリア")
    parser_update.add_argument("--clear-due-date", action="store_true", help="期限日をクリア")

    subparsers.add_parser(
        "complete", parents=[format_parent, id_parent], help="完了状態を切り替える"
    )
    subparsers.add_parser("delete", parents=[format_parent, id_parent], help="タスクを削除")
    subparsers.add_parser("get", parents=[format_parent, id_parent], help="特定のタスクを取得")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLIエントリポイント"""
    args = build_parser().parse_args(argv)
    client = TaskApiClient(api_url=args.api_url, timeout=args.timeout)

    try:
        return COMMANDS[args.command](client, args)
    except ValidationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
    except TaskApiError as exc:
        print(f"Error: {exc.message} (HTTP {exc.status_code})", file=sys.stderr)
    except requests.exceptions.RequestException as exc:
        print(f"Error: タスクAPIに接続できません: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
