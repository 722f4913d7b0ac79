import gzip
import logging
from datetime import date
from pathlib import Path

from moondash.schemas import OS, Dashboard

logger = logging.getLogger(__name__)

OUTPUT_OS_DIRS = {
    OS.linux: 'linux',
    OS.macos: 'mac',
    OS.windows: 'windows',
}


def write_dashboard(
    dashboard: Dashboard, output_dir: Path, host_os: OS, day: date
) -> Path:
    """
    Appends the dashboard as one JSON line to the gzip-compressed daily
    file for ``host_os``. ``latest_data.jsonl.gz`` next to it holds only
    this dashboard.
    """
    target_dir = output_dir / OUTPUT_OS_DIRS[host_os]
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = target_dir / f'{day:%Y-%m-%d}_data.jsonl.gz'

    line = dashboard.model_dump_json() + '\n'
    # each write adds a gzip member; readers see one concatenated stream
    with gzip.open(filename, 'at', encoding='utf-8') as f:
        f.write(line)

    latest = target_dir / 'latest_data.jsonl.gz'
    with gzip.open(latest, 'wt', encoding='utf-8') as f:
        f.write(line)
    logger.info(f'Wrote {filename} and {latest}')
    return filename
