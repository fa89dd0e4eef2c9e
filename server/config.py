"""Configuration settings for the upload server."""

import os

from common.constants import (
    BLOB_UPLOAD_TIMEOUT_SECONDS,
    GITHUB_API_TIMEOUT_SECONDS,
    SESSION_SWEEP_INTERVAL_SECONDS,
    SESSION_TTL_SECONDS,
)


SERVER_HOST = os.environ.get("SHELF_SERVER_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("SHELF_SERVER_PORT", "8000"))

# "github" persists the catalog in the repository; "memory" keeps it in-process
STORAGE_BACKEND = os.environ.get("SHELF_STORAGE_BACKEND", "github")

GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN", "")

GITHUB_OWNER = os.environ.get("GITHUB_OWNER", "")

GITHUB_REPO = os.environ.get("GITHUB_REPO", "")

GITHUB_BRANCH = os.environ.get("GITHUB_BRANCH", "main")

GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")

GITHUB_USER_AGENT = "AssetShelf-Server"

GITHUB_TIMEOUT_SECONDS = float(os.environ.get("SHELF_GITHUB_TIMEOUT", str(GITHUB_API_TIMEOUT_SECONDS)))

BLOB_TIMEOUT_SECONDS = float(os.environ.get("SHELF_BLOB_TIMEOUT", str(BLOB_UPLOAD_TIMEOUT_SECONDS)))

SESSION_TTL = int(os.environ.get("SHELF_SESSION_TTL", str(SESSION_TTL_SECONDS)))

SESSION_SWEEP_INTERVAL = int(os.environ.get("SHELF_SESSION_SWEEP_INTERVAL", str(SESSION_SWEEP_INTERVAL_SECONDS)))

DOWNLOAD_ALLOWED_HOSTS = tuple(
    host.strip()
    for host in os.environ.get(
        "SHELF_DOWNLOAD_ALLOWED_HOSTS",
        "github.com,objects.githubusercontent.com,release-assets.githubusercontent.com",
    ).split(",")
    if host.strip()
)

PUBLIC_ORIGIN = os.environ.get("SHELF_PUBLIC_ORIGIN", "")

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("SHELF_CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]
