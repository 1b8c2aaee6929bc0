import os
import stat
import textwrap

import pytest

from tests.fakes import FFMPEG_OK, YTDLP_OK


def write_script(path, body):
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def bin_dir(tmp_path):
    d = tmp_path / "bin"
    d.mkdir()
    return d


@pytest.fixture
def uploads(tmp_path):
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def make_tool(bin_dir):
    def _make(name, body):
        return write_script(bin_dir / name, body)
    return _make


@pytest.fixture
def tools(make_tool, monkeypatch):
    """Point the services at fake yt-dlp/ffmpeg scripts."""
    from clipapi.services import downloader, remux

    def _install(ytdlp=YTDLP_OK, ffmpeg=FFMPEG_OK):
        monkeypatch.setattr(downloader, "YTDLP_BIN", make_tool("yt-dlp", ytdlp))
        monkeypatch.setattr(remux, "FFMPEG_BIN", make_tool("ffmpeg", ffmpeg))
    return _install
