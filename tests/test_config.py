import pytest

from rmsgateway.config import (
    Config,
    ConfigError,
    ConfigErrorCode,
    VersionError,
    VersionErrorCode,
    VersionInfo,
    load_config,
    load_env,
    load_version,
)


def _write(path, text):
    path.write_text(text)
    return path


def test_load_config_uppercases_call(tmp_path):
    cfg = _write(tmp_path / "gateway.conf", "GWCALL=n0call-10\nGRIDSQUARE=FN20\n")
    conf = load_config(cfg)
    assert conf.gwcall == "N0CALL-10"
    assert conf.gridsquare == "FN20"
    assert conf.channelfile is None
    assert conf.authfile is None


def test_load_config_hookdir_default(tmp_path):
    cfg = _write(tmp_path / "gateway.conf", "GWCALL=N0CALL\n")
    assert load_config(cfg, "/opt/hooks").hookdir == "/opt/hooks"


def test_load_config_hookdir_from_file_wins(tmp_path):
    cfg = _write(tmp_path / "gateway.conf", "GWCALL=N0CALL\nHOOKDIR=/srv/h\n")
    assert load_config(cfg, "/opt/hooks").hookdir == "/srv/h"


def test_load_config_strips_blanks(tmp_path):
    cfg = _write(tmp_path / "gateway.conf", "  \tGWCALL=N0CALL  \n")
    assert load_config(cfg) == Config(gwcall="N0CALL")


def test_load_config_missing_call(tmp_path):
    cfg = _write(tmp_path / "gateway.conf", "GRIDSQUARE=FN20\n")
    with pytest.raises(ConfigError) as info:
        load_config(cfg)
    assert info.value.code is ConfigErrorCode.MISSING_CALL


def test_load_config_call_too_long(tmp_path):
    cfg = _write(tmp_path / "gateway.conf", "GWCALL=N0CALLXX-10\n")
    with pytest.raises(ConfigError) as info:
        load_config(cfg)
    assert info.value.code is ConfigErrorCode.INVALID_CALL


def test_load_config_unreadable_file(tmp_path):
    with pytest.raises(ConfigError) as info:
        load_config(tmp_path / "absent.conf")
    assert info.value.code is ConfigErrorCode.MAP_ERROR


def test_load_env_sets_two_field_lines(tmp_path):
    env = _write(
        tmp_path / "env",
        "# comment\nFOO=bar\nBAD\nA=b=c\nX==y\nZ=q # trailing\n",
    )
    environ = {}
    assigned = load_env(env, environ)
    assert environ == {"FOO": "bar", "X": "y", "Z": "q "}
    assert assigned == environ


def test_load_env_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_env(tmp_path / "none", {})


def test_load_version_full(tmp_path):
    ver = _write(
        tmp_path / ".version_info",
        "PACKAGE=pkg\nPROGRAM=prog\nLABEL=2.4.0\nAUTHOR=someone\n",
    )
    info = load_version(ver)
    assert info == VersionInfo(package="pkg", program="prog", label="2.4.0", author="someone")


@pytest.mark.parametrize(
    "text, code",
    [
        ("PROGRAM=prog\nLABEL=1\n", VersionErrorCode.MISSING_PACKAGE),
        ("PACKAGE=pkg\nLABEL=1\n", VersionErrorCode.MISSING_PROGRAM),
        ("PACKAGE=pkg\nPROGRAM=prog\n", VersionErrorCode.MISSING_LABEL),
    ],
)
def test_load_version_missing_required(tmp_path, text, code):
    ver = _write(tmp_path / ".version_info", text)
    with pytest.raises(VersionError) as info:
        load_version(ver)
    assert info.value.code is code


def test_load_version_unreadable(tmp_path):
    with pytest.raises(VersionError) as info:
        load_version(tmp_path / "nothing")
    assert info.value.code is VersionErrorCode.MAP_ERROR