"""Runtime settings, read once from the environment at import."""

import logging
import os


def _log_level(name: str) -> str:
    # Unknown names fall back to WARNING rather than failing before the run starts.
    name = name.strip().upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return 'WARNING'


SYMBOL_SERVER = os.environ.get('UNITY_PDB_SYMBOL_SERVER', 'http://symbolserver.unity3d.com/')
CHUNK_SIZE = int(os.environ.get('UNITY_PDB_CHUNK_SIZE', 64 * 1024))
TIMEOUT = float(os.environ.get('UNITY_PDB_TIMEOUT', 300))
EXTRACT_TIMEOUT = float(os.environ.get('UNITY_PDB_EXTRACT_TIMEOUT', 120))
LOG_LEVEL = _log_level(os.environ.get('UNITY_PDB_LOG_LEVEL', 'WARNING'))

USER_AGENT = 'Microsoft-Symbol-Server/10.0.0.0'

SYMBOL_FILE_EXTENSION = '.pdb'
COMPRESSED_SYMBOL_EXTENSION = '.pd_'
ARCHIVE_EXTENSION = '.cab'

# The service addresses every archive with age 1, whatever the record says.
LOOKUP_AGE_TOKEN = '1'
