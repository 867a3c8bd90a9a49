import os
import stat

import pytest

from rmsgateway.hooks import run_hook
from rmsgateway.rms import START_RMSGW


def make_hook(directory, name, body):
    path = directory / name
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IRUSR)
    return path


def test_successful_hook_runs(tmp_path):
    make_hook(tmp_path, START_RMSGW, 'touch "$(dirname "$0")/ran"\nexit 0')
    assert run_hook(tmp_path, START_RMSGW, "N0CALL") is True
    assert (tmp_path / "ran").exists()


def test_failing_hook(tmp_path):
    make_hook(tmp_path, "failing", "exit 3")
    assert run_hook(str(tmp_path), "failing") is False


def test_missing_hook_is_not_an_error(tmp_path):
    assert run_hook(tmp_path, "absent-hook") is True


def test_missing_hook_directory(tmp_path):
    assert run_hook(os.fspath(tmp_path / "nowhere"), "any") is False


def test_non_executable_hook_fails(tmp_path):
    path = tmp_path / "plain"
    path.write_text("exit 0\n")
    path.chmod(stat.S_IRUSR | stat.S_IWUSR)
    assert run_hook(tmp_path, "plain") is False


@pytest.mark.parametrize("name", ["", None])
def test_empty_hook_name(tmp_path, name):
    with pytest.raises(ValueError):
        run_hook(tmp_path, name)


@pytest.mark.parametrize("directory", ["", None])
def test_empty_hook_directory(directory):
    with pytest.raises(ValueError):
        run_hook(directory, "hook")


def test_too_many_arguments(tmp_path):
    with pytest.raises(ValueError):
        run_hook(tmp_path, "hook", *["x"] * 200)