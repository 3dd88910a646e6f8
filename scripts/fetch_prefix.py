"""Download every object under a bucket prefix.

Usage:
    python -m scripts.fetch_prefix BUCKET [PREFIX] [OUT_DIR]
Without OUT_DIR, prints each key and its decoded size. Backend, credentials
and concurrency come from the environment / .env (see filestore.core.config).
"""

import asyncio
import base64
import sys
from pathlib import Path

from filestore.application.services import FileStorageService
from filestore.core.config import get_settings
from filestore.infrastructure.exceptions import StorageException
from filestore.shared.telemetry import TelemetryConfig, setup_logging


async def main() -> None:
    """Fetch the prefix with get_files and write or summarize the results."""
    if len(sys.argv) < 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    bucket = sys.argv[1]
    prefix = sys.argv[2] if len(sys.argv) > 2 else ""
    out_dir = Path(sys.argv[3]) if len(sys.argv) > 3 else None

    settings = get_settings()
    setup_logging()
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        enabled=settings.telemetry_enabled,
    )
    telemetry.setup_telemetry(settings.telemetry_exporter)
    telemetry.instrument_botocore()

    service = FileStorageService.from_settings(settings)
    try:
        files = await service.get_files(bucket, prefix)
    except StorageException as e:
        print(f"{e.error_code}: {e.message} ({e.details.get('reason')})", file=sys.stderr)
        sys.exit(1)
    finally:
        telemetry.shutdown()

    total_bytes = 0
    for f in files:
        content = base64.b64decode(f.body)
        total_bytes += len(content)
        if out_dir is None:
            print(f"{f.key}\t{len(content)}")
            continue
        target = (out_dir / f.key).resolve()
        if out_dir.resolve() not in target.parents:
            print(f"Skipping key outside output dir: {f.key}", file=sys.stderr)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    print(f"Done. {len(files)} object(s), {total_bytes} byte(s)")


if __name__ == "__main__":
    asyncio.run(main())
