from __future__ import annotations

import functools

import httpx

import codegen_gateway.cli.run_generate as cli_mod
from codegen_gateway.dispatch.dispatcher import Dispatcher


def _patch_transport(monkeypatch, handler) -> None:
    patched = functools.partial(Dispatcher, transport=httpx.MockTransport(handler))
    monkeypatch.setattr(cli_mod, "Dispatcher", patched)


def test_prints_generated_code(monkeypatch, capsys, tmp_path) -> None:
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json={"output": "print('hi')"}))
    code = cli_mod.main(["--prompt", "say hi", "--language", "python", "--config", str(tmp_path / "none.yaml")])
    assert code == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "print('hi')"


def test_empty_prompt_exit_code(tmp_path) -> None:
    assert cli_mod.main(["--prompt", "", "--config", str(tmp_path / "none.yaml")]) == 2


def test_provider_failure_exit_code(monkeypatch, tmp_path) -> None:
    _patch_transport(monkeypatch, lambda request: httpx.Response(503))
    assert cli_mod.main(["--prompt", "p", "--config", str(tmp_path / "none.yaml")]) == 1
