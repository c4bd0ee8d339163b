"""Database schema for the local SQLite vector index."""

SCHEMA = """
-- Records table: one row per indexed chunk
CREATE TABLE IF NOT EXISTS records (
    id TEXT PRIMARY KEY,           -- <sourcePath>-<ordinal>
    source_path TEXT,
    text TEXT NOT NULL,
    metadata TEXT NOT NULL,        -- JSON object of primitive scalars
    embedding BLOB NOT NULL        -- float32 bytes
);

-- Index metadata (embedding dimension)
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);

CREATE INDEX IF NOT EXISTS idx_records_source ON records(source_path);
"""
