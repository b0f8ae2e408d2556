"""Pytest configuration and fixtures."""

import io
import sys
import zipfile
from pathlib import Path

import pytest

# Add repo root and src to path (for 'plugins.*' and 'vaultimport.*' imports)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))
sys.path.insert(0, str(repo_root / "src"))


def make_zip(entries) -> bytes:
    """Build an in-memory ZIP archive.

    Args:
        entries: Iterable of (name, content) pairs in archive order. A name
            ending with '/' becomes a directory entry; str content is
            UTF-8 encoded.

    Returns:
        Archive bytes
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries:
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), b"")
                continue
            data = content.encode("utf-8") if isinstance(content, str) else content
            zf.writestr(name, data)
    return buf.getvalue()


class RecordingNotifier:
    """Notifier that keeps every notice for assertions."""

    def __init__(self):
        self.notices = []

    def notify(self, message, *, level="info"):
        self.notices.append((level, message))

    @property
    def messages(self):
        return [m for _level, m in self.notices]


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Reset process-wide buses and verbosity around every test."""
    from vaultimport.core.diagnostics import reset_jsonl_sink_flag
    from vaultimport.core.events import get_event_bus
    from vaultimport.core.log_bus import get_log_bus
    from vaultimport.core.logging import VerbosityLevel, set_console_enabled, set_verbosity

    get_event_bus().clear()
    get_log_bus().clear()
    reset_jsonl_sink_flag()
    set_verbosity(VerbosityLevel.NORMAL)
    set_console_enabled(True)
    yield
    get_event_bus().clear()
    get_log_bus().clear()
    reset_jsonl_sink_flag()
    set_verbosity(VerbosityLevel.NORMAL)
    set_console_enabled(True)


@pytest.fixture
def memory_storage():
    """Create an empty in-memory vault with the default config dir."""
    from plugins.vault_storage.service import MemoryVaultStorage

    return MemoryVaultStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def config_resolver(tmp_path):
    """Create ConfigResolver isolated from the real user and system files.

    Returns:
        ConfigResolver instance
    """
    from vaultimport.core import ConfigResolver

    return ConfigResolver(
        cli_args={},
        user_config_path=tmp_path / "user.yaml",
        system_config_path=tmp_path / "system.yaml",
    )


@pytest.fixture
def zip_bytes():
    """Return the make_zip builder."""
    return make_zip
