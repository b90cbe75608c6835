"""Unit tests for the CLI AppContext builder."""

from unittest.mock import patch

import pytest

from shadowkey.frontend.cli.context import build_context, read_passphrase
from shadowkey.security.kdf import KDFProfile


def test_build_context_from_env(tmp_path):
    ctx = build_context(environ={"SHADOWKEY_HOME": str(tmp_path), "SHADOWKEY_KDF": "light"})

    assert ctx.storage.root == tmp_path
    assert ctx.store.storage is ctx.storage
    assert ctx.store.profile is KDFProfile.LIGHT


def test_build_context_arguments_win(tmp_path):
    ctx = build_context(
        keys_dir=tmp_path / "other",
        profile=KDFProfile.LIGHT,
        environ={"SHADOWKEY_HOME": str(tmp_path), "SHADOWKEY_KDF": "standard"},
    )
    assert ctx.storage.root == tmp_path / "other"
    assert ctx.config.profile is KDFProfile.LIGHT


def test_read_passphrase_from_env():
    with patch("shadowkey.frontend.cli.context.getpass.getpass") as gp:
        assert read_passphrase(environ={"SHADOWKEY_PASSPHRASE": "s3cret"}) == "s3cret"
    gp.assert_not_called()


def test_read_passphrase_prompt_confirm():
    with patch("shadowkey.frontend.cli.context.getpass.getpass", side_effect=["a", "a"]):
        assert read_passphrase(confirm=True, environ={}) == "a"

    with patch("shadowkey.frontend.cli.context.getpass.getpass", side_effect=["a", "b"]):
        with pytest.raises(ValueError):
            read_passphrase(confirm=True, environ={})
