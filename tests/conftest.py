"""Shared pytest fixtures for logflow tests."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from logflow.config import Settings


@pytest.fixture()
def tmp_log_file(tmp_path: Path):
    """Return a factory that creates temporary log files."""

    def _make(lines: list[str], name: str = "test.log") -> Path:
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p

    return _make


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment, writing reports under tmp_path."""
    return Settings(_env_file=None, output_dir=tmp_path / "reports", parsers=[])


@pytest.fixture()
def json_log_lines() -> list[str]:
    return [
        json.dumps({"timestamp": "2025-08-01T10:00:00Z", "level": "INFO", "message": "startup"}),
        json.dumps({"timestamp": "2025-08-01T10:00:01Z", "level": "ERROR", "message": "disk full", "host": "db1"}),
        json.dumps({"timestamp": "2025-08-01T10:00:02Z", "level": "WARN", "message": "retry"}),
        json.dumps({"timestamp": "2025-08-01T11:00:03Z", "level": "INFO", "message": "done"}),
    ]


@pytest.fixture()
def apache_log_lines() -> list[str]:
    return [
        '192.168.1.1 - - [01/Aug/2025:10:00:00 +0000] "GET /api/v1/health HTTP/1.1" 200 512 "-" "curl/8.0"',
        '10.0.0.1 - bob [01/Aug/2025:10:00:01 +0000] "POST /api/v1/jobs HTTP/1.1" 201 1024 "https://example.com/" "Mozilla/5.0"',
        '192.168.1.2 - - [01/Aug/2025:10:00:02 +0000] "GET /missing HTTP/1.1" 404 - "-" "Mozilla/5.0"',
        '192.168.1.3 - - [01/Aug/2025:11:30:00 +0000] "GET /api/v1/health HTTP/1.1" 503 0 "-" "kube-probe/1.29"',
    ]


@pytest.fixture()
def app_log_lines() -> list[str]:
    return [
        "2025-08-01 10:00:00 [main] INFO  com.shop.Application - Started in 2.1s",
        "2025-08-01 10:00:05 [http-nio-8080-exec-1] ERROR com.shop.OrderService - Order failed",
        "java.lang.IllegalStateException: stock exhausted",
        "\tat com.shop.OrderService.place(OrderService.java:42)",
        "\tat com.shop.OrderController.post(OrderController.java:17)",
        "2025-08-01 10:00:06 [http-nio-8080-exec-2] WARN  com.shop.Cache - Cache miss ratio high",
    ]
