# models/utils.py
import re
import time
import unicodedata
from datetime import datetime, timezone
from typing import Optional, Tuple

from .constants import SLUG_MAX


# ── 시간 ───────────────────────────────────────────────────
def now_str() -> str:
    """DATETIME 컬럼용 UTC 'YYYY-MM-DD HH:MM:SS'"""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def unix_now() -> int:
    return int(time.time())


# ── 슬러그 ─────────────────────────────────────────────────
def slugify(text: str, max_length: int = SLUG_MAX) -> str:
    """'Hello, World!' → 'hello-world'. 영숫자 외 문자는 '-' 로 접는다(한글 등 유니코드 문자는 유지)."""
    s = unicodedata.normalize("NFKC", text or "").strip().lower()
    s = re.sub(r"[^\w]+", "-", s, flags=re.UNICODE)
    s = re.sub(r"[-_]{2,}", "-", s).strip("-_")
    return s[:max_length] or "untitled"


# ── 페이지 보정 ────────────────────────────────────────────
def clamp_page(limit: int, offset: int, limit_max: int = 100) -> Tuple[int, int]:
    lim = limit if limit and 1 <= limit <= limit_max else min(20, limit_max)
    off = offset if offset and offset > 0 else 0
    return lim, off


def as_flag(value: Optional[bool]) -> int:
    return 1 if value else 0
