"""
Portfolio uploads for onboarding Step 3.

Files go to the portfolio bucket under the uploader's user id, and each
successful upload gets one ordered creator_portfolio row. Removing an item
deletes both the stored object and its row.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field

from supabase import Client

from .forms import PORTFOLIO_MAX_ITEMS
from .store import PersistenceError, run_query

logger = logging.getLogger(__name__)


class PortfolioLimitError(Exception):
    """The batch would push the portfolio past its cap."""


@dataclass
class PortfolioUpload:
    """One file from a multipart upload."""
    filename: str
    content_type: str
    data: bytes


@dataclass
class UploadReport:
    uploaded: list[dict] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)  # Filenames


def file_type_for(content_type: str | None) -> str | None:
    """Portfolio rows are either 'video' or 'image'. None for anything else."""
    major = (content_type or "").split("/", 1)[0].lower()
    return major if major in ("image", "video") else None


def build_object_path(user_id: str, filename: str, now_ms: int | None = None, token: str | None = None) -> str:
    """
    <user_id>/<millis>-<random>.<ext>

    The first folder must be the uploader's id; storage policies key on it.
    """
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if token is None:
        token = secrets.token_hex(3)
    return f"{user_id}/{now_ms}-{token}.{ext}"


def object_path_from_url(file_url: str, bucket: str) -> str | None:
    """Recover the storage path from a public URL."""
    marker = f"/{bucket}/"
    if marker not in file_url:
        return None
    path = file_url.split(marker, 1)[1]
    return path.split("?", 1)[0] or None


async def list_portfolio(client: Client, creator_id: str) -> list[dict]:
    result = run_query(
        client.table("creator_portfolio")
        .select("id, file_url, file_type, title, description, display_order")
        .eq("creator_id", creator_id)
        .order("display_order"),
        "Could not load your portfolio.",
    )
    return result.data


async def upload_portfolio_items(
    client: Client,
    creator_id: str,
    user_id: str,
    files: list[PortfolioUpload],
    bucket: str,
) -> UploadReport:
    """
    Upload a batch of files.

    The whole batch is refused if it would exceed PORTFOLIO_MAX_ITEMS.
    Individual failures skip that file and are reported, as do files that
    are neither images nor videos (those are never stored).
    """
    existing = await list_portfolio(client, creator_id)
    if len(existing) + len(files) > PORTFOLIO_MAX_ITEMS:
        raise PortfolioLimitError(f"You can upload maximum {PORTFOLIO_MAX_ITEMS} items.")

    next_order = max((item.get("display_order") or 0 for item in existing), default=-1) + 1
    report = UploadReport()
    storage = client.storage.from_(bucket)

    for upload in files:
        file_type = file_type_for(upload.content_type)
        if file_type is None:
            logger.warning(f"Skipping {upload.filename}: unsupported type {upload.content_type}")
            report.failed.append(upload.filename)
            continue

        path = build_object_path(user_id, upload.filename)
        try:
            storage.upload(path, upload.data, {"content-type": upload.content_type})
        except Exception as e:
            logger.warning(f"Upload of {upload.filename} failed: {e}")
            report.failed.append(upload.filename)
            continue

        public_url = storage.get_public_url(path)
        try:
            result = run_query(
                client.table("creator_portfolio").insert({
                    "creator_id": creator_id,
                    "file_url": public_url,
                    "file_type": file_type,
                    "display_order": next_order,
                }),
                f"Could not save {upload.filename}",
            )
        except PersistenceError:
            # Don't leave an orphaned object behind
            try:
                storage.remove([path])
            except Exception as e:
                logger.warning(f"Cleanup of {path} failed: {e}")
            report.failed.append(upload.filename)
            continue

        report.uploaded.append(result.data[0])
        next_order += 1

    logger.info(
        f"Portfolio upload for creator {creator_id}: "
        f"{len(report.uploaded)} stored, {len(report.failed)} failed"
    )
    return report


async def remove_portfolio_item(client: Client, creator_id: str, item_id: str, bucket: str) -> bool:
    """Delete the stored object and its row. False if the item isn't found."""
    result = run_query(
        client.table("creator_portfolio")
        .select("id, file_url")
        .eq("id", item_id)
        .eq("creator_id", creator_id),
        "Could not remove portfolio item.",
    )
    if not result.data:
        return False

    path = object_path_from_url(result.data[0]["file_url"], bucket)
    if path:
        try:
            client.storage.from_(bucket).remove([path])
        except Exception as e:
            logger.error(f"Could not delete {path} from storage: {e}")
            raise PersistenceError("Could not remove portfolio item.") from e

    run_query(
        client.table("creator_portfolio").delete().eq("id", item_id).eq("creator_id", creator_id),
        "Could not remove portfolio item.",
    )
    return True
