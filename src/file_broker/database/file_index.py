import sqlite3
from datetime import datetime, timezone
from typing import List, Optional


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_db(db_path: str = "file_index.db") -> None:
    """Initialize database with all required tables."""
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()

        # Files stored for each notebook
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS files (
                file_id INTEGER PRIMARY KEY AUTOINCREMENT,
                notebook_id VARCHAR(100) NOT NULL,
                filename VARCHAR(255) NOT NULL,
                last_updated TIMESTAMP NOT NULL,
                UNIQUE(notebook_id, filename)
            )
        ''')

        # Remote URLs fetched into notebook files on a schedule
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS file_sources (
                file_source_id INTEGER PRIMARY KEY AUTOINCREMENT,
                notebook_id VARCHAR(100) NOT NULL,
                source_url TEXT NOT NULL,
                destination_filename VARCHAR(255) NOT NULL,
                update_interval VARCHAR(50) NULL,    -- NULL means never refreshed
                created_at TIMESTAMP NOT NULL
            )
        ''')

        conn.commit()
    finally:
        conn.close()


def upsert_file(notebook_id: str, filename: str, db_path: str = "file_index.db") -> dict:
    """Record a save of `filename`, keeping its id if it was already indexed."""
    last_updated = _now()
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()

        cursor.execute(
            'SELECT file_id FROM files WHERE notebook_id = ? AND filename = ?',
            (notebook_id, filename)
        )
        result = cursor.fetchone()

        if result:
            file_id = result[0]
            cursor.execute(
                'UPDATE files SET last_updated = ? WHERE file_id = ?',
                (last_updated, file_id)
            )
        else:
            cursor.execute(
                'INSERT INTO files (notebook_id, filename, last_updated) VALUES (?, ?, ?)',
                (notebook_id, filename, last_updated)
            )
            file_id = cursor.lastrowid

        conn.commit()
        return {"filename": filename, "id": file_id, "last_updated": last_updated}
    finally:
        conn.close()


def remove_file(notebook_id: str, filename: str, db_path: str = "file_index.db") -> bool:
    """Drop a file from the index. Returns False if it was not indexed."""
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute(
            'DELETE FROM files WHERE notebook_id = ? AND filename = ?',
            (notebook_id, filename)
        )
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def list_files(notebook_id: str, db_path: str = "file_index.db") -> List[dict]:
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute(
            'SELECT file_id, filename, last_updated FROM files WHERE notebook_id = ? ORDER BY file_id',
            (notebook_id,)
        )
        return [
            {"id": row[0], "filename": row[1], "last_updated": row[2]}
            for row in cursor.fetchall()
        ]
    finally:
        conn.close()


def add_file_source(
    notebook_id: str,
    source_url: str,
    destination_filename: str,
    update_interval: Optional[str] = None,
    db_path: str = "file_index.db",
) -> dict:
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO file_sources (notebook_id, source_url, destination_filename, update_interval, created_at)
            VALUES (?, ?, ?, ?, ?)
        ''', (notebook_id, source_url, destination_filename, update_interval, _now()))
        conn.commit()
        return {
            "id": cursor.lastrowid,
            "source_url": source_url,
            "destination_filename": destination_filename,
            "update_interval": update_interval,
        }
    finally:
        conn.close()


def remove_file_source(file_source_id: int, db_path: str = "file_index.db") -> bool:
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute('DELETE FROM file_sources WHERE file_source_id = ?', (file_source_id,))
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()
