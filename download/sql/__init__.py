# SPDX-License-Identifier: MIT
# SQL schema definitions

# Embedded SQL schemas for reliable packaging
ROM_SCHEMA = """
-- ROM metadata cache, one row per package md5
CREATE TABLE IF NOT EXISTS rom (
  id            INTEGER PRIMARY KEY,
  md5           TEXT NOT NULL UNIQUE,
  device        TEXT NOT NULL,
  version       TEXT NOT NULL,
  bigversion    TEXT,
  branch        TEXT,
  codebase      TEXT,
  filename      TEXT NOT NULL,
  filesize      TEXT,
  changelog     TEXT,
  file_path     TEXT,
  created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
  updated_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),

  CHECK (length(md5) = 32)
);

CREATE INDEX IF NOT EXISTS idx_rom_device_version
ON rom(device, version);

CREATE INDEX IF NOT EXISTS idx_rom_filename
ON rom(filename);

CREATE TRIGGER IF NOT EXISTS trg_rom_updated_at
AFTER UPDATE ON rom
FOR EACH ROW
BEGIN
  UPDATE rom SET updated_at = strftime('%Y-%m-%dT%H:%M:%SZ','now') WHERE id = OLD.id;
END;
"""

QUERY_LOG_SCHEMA = """
-- ROM query log table
CREATE TABLE IF NOT EXISTS query_log (
  id                INTEGER PRIMARY KEY,
  session_id        TEXT NOT NULL,
  codename          TEXT NOT NULL,
  system_version    TEXT NOT NULL,
  android_version   TEXT NOT NULL,
  port              TEXT NOT NULL DEFAULT '1'
                       CHECK (port IN ('1','2')),
  status            TEXT NOT NULL DEFAULT 'ok'
                       CHECK (status IN ('ok','no_info','error')),
  current_version   TEXT,
  latest_version    TEXT,
  created_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_query_log__codename_created
ON query_log (codename, created_at DESC);

CREATE INDEX IF NOT EXISTS idx_query_log__status_created
ON query_log (status, created_at DESC);
"""
