# config.py
import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_PATH = os.path.join(BASE_DIR, "db.sqlite3")

# =========================
# DB
# =========================
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite+aiosqlite:///{DB_PATH}")

# =========================
# 스키마 (MySQL 전용 옵션은 SQLite에서 무시됨)
# =========================
TABLE_PREFIX = os.getenv("FORUM_TABLE_PREFIX", "wp_wpforo_")
DB_CHARSET = os.getenv("DB_CHARSET", "utf8mb4")
DB_COLLATE = os.getenv("DB_COLLATE", "utf8mb4_unicode_520_ci")

# =========================
# 로그 / 접속자
# =========================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
ONLINE_WINDOW = int(os.getenv("FORUM_ONLINE_WINDOW", "240"))  # 초
