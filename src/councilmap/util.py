"""Utility helpers for logging, document IO, and HTTP sessions."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Iterable

import requests
import yaml


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_JSON_SUFFIXES = {".json", ".geojson"}


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure root logging to console and optionally a file."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def ensure_directories(paths: Iterable[Path]) -> None:
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, sort_keys=True, ensure_ascii=False)
        fh.write("\n")


def read_document(path: Path) -> Any:
    """Parse a JSON or YAML document, chosen by file suffix."""
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in _JSON_SUFFIXES:
            return json.load(fh)
        return yaml.safe_load(fh)


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        while True:
            chunk = fh.read(1024 * 1024)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.strip().lower().startswith(("http://", "https://"))


def build_session(user_agent: str) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def fetch_json(session: requests.Session, url: str, *, timeout_s: float) -> Any:
    """Single GET attempt; raises on transport errors and non-2xx responses."""
    response = session.get(url, timeout=timeout_s)
    response.raise_for_status()
    return response.json()
