import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from . import config
from .errors import ArchiveCorruptError, CleanupFailedError, StorageIOError

log = logging.getLogger(__name__)


def _unpack_command(archive_path, out_dir) -> list:
    if os.name == 'nt':
        return ['expand', str(archive_path), '-F:*', str(out_dir)]
    return ['cabextract', '-q', '-d', str(out_dir), str(archive_path)]


def _copy_entry(entry: Path, symbol_file_path) -> None:
    try:
        with open(entry, 'rb') as src, open(symbol_file_path, 'wb') as dst:
            shutil.copyfileobj(src, dst)
    except OSError as e:
        raise StorageIOError(
                f'could not write {symbol_file_path}: {e.strerror or e}', stage='extract') from e


def extract_archive(archive_path, symbol_file_path) -> int:
    """Unpack a cabinet and copy its contents to ``symbol_file_path``.

    Every entry is written to the same destination. Entries are copied in
    sorted order of their extracted paths, not in the cabinet's folder order,
    so with more than one entry the one whose path sorts last wins. Entries
    sharing a name are merged by the unpacking tool and count once.
    Returns the number of entries.
    """
    with tempfile.TemporaryDirectory(prefix='unity-pdb-') as out_dir:
        command = _unpack_command(archive_path, out_dir)
        log.debug('running %s', ' '.join(command))

        try:
            result = subprocess.run(command, capture_output=True, timeout=config.EXTRACT_TIMEOUT)
        except FileNotFoundError as e:
            raise ArchiveCorruptError(
                    f'{command[0]} is not installed, cannot unpack {archive_path}') from e
        except subprocess.TimeoutExpired as e:
            raise ArchiveCorruptError(
                    f'{command[0]} timed out after {e.timeout}s on {archive_path}') from e

        if result.returncode != 0:
            details = result.stderr.decode(errors='replace').strip()
            raise ArchiveCorruptError(
                    f'{command[0]} could not unpack {archive_path}: '
                    f'{details or f"exit status {result.returncode}"}')

        entries = sorted(p for p in Path(out_dir).rglob('*') if p.is_file())
        if not entries:
            raise ArchiveCorruptError(f'{archive_path} contains no files')

        for entry in entries:
            log.debug('copying %s to %s', entry.name, symbol_file_path)
            _copy_entry(entry, symbol_file_path)

    return len(entries)


def delete_archive(archive_path) -> None:
    try:
        os.remove(archive_path)
    except OSError as e:
        raise CleanupFailedError(f'could not delete {archive_path}: {e.strerror or e}') from e
    log.debug('deleted %s', archive_path)
