"""End-to-end tests for the command line interface."""

from __future__ import annotations

import json
import logging

import pytest

from yoyo import cli
from yoyo.core import TraitCountsConfig
from yoyo.generator.metadata import DATA_URI_PREFIX, decode_metadata
from yoyo.generator.seed import generate_seed

REQUESTER = "0x" + "ab" * 20
ENTROPY = "0x" + "5e" * 32


def _run(capsys, *argv: str):
    code = cli.main(list(argv))
    return code, capsys.readouterr().out


def test_seed_command_matches_library(capsys) -> None:
    code, out = _run(
        capsys,
        "seed", "3", "--requester", REQUESTER, "--entropy", ENTROPY, "--timestamp", "1000", "--counts", "8,8,8,8,8,8,8",
    )

    assert code == 0
    payload = json.loads(out)
    expected = generate_seed(3, REQUESTER, ENTROPY, 1000, TraitCountsConfig.uniform(8))
    assert payload["seed"] == expected.to_dict()
    assert len(payload["windows"]) == 7
    assert payload["hash"] == "sha3_256"


def test_seed_command_rejects_zero_count(capsys, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="yoyo.cli"):
        code, _ = _run(
            capsys,
            "seed", "3", "--requester", REQUESTER, "--entropy", ENTROPY, "--timestamp", "1000", "--counts", "1,0,1,1,1,1,1",
        )

    assert code == 1
    assert "Pants" in caplog.text


def test_render_command_outputs_data_uri(capsys, monkeypatch) -> None:
    monkeypatch.setenv("YOYO_IMAGE_BASE_URI", "ipfs://cid/")

    code, out = _run(capsys, "render", "12", "--seed", "0,1,2,3,4,5,6")
    assert code == 0
    assert out.strip().startswith(DATA_URI_PREFIX)
    assert decode_metadata(out.strip())["image"] == "ipfs://cid/12.png"

    code, out = _run(capsys, "render", "12", "--seed", "0,1,2,3,4,5,6", "--decoded")
    assert code == 0
    assert json.loads(out)["name"] == "YOYO #12"


def test_render_command_reports_index_out_of_range(capsys, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="yoyo.cli"):
        code, _ = _run(capsys, "render", "1", "--seed", "0,0,0,0,0,0,8")

    assert code == 1
    assert "Accessory index 8" in caplog.text


def test_render_command_rejects_malformed_seed(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["render", "1", "--seed", "1,2,3"])
    assert excinfo.value.code == 2


def test_mint_token_uri_and_review_flow(capsys, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("YOYO_STORE_PATH", str(tmp_path / "store.json"))
    monkeypatch.setenv("YOYO_TRAIT_COUNTS", "8,8,8,8,8,8,8")

    code, out = _run(capsys, "mint", "--requester", REQUESTER, "--count", "2", "--entropy", ENTROPY, "--timestamp", "5")
    assert code == 0
    minted = json.loads(out)
    assert [entry["identifier"] for entry in minted] == [1, 2]
    assert (tmp_path / "store.json").exists()

    code, out = _run(capsys, "token-uri", "2")
    assert code == 0
    document = decode_metadata(out.strip())
    assert document["name"] == "YOYO #2"
    assert [entry["value"] for entry in document["attributes"]]

    code, out = _run(capsys, "token-uri", "2", "--decoded")
    assert json.loads(out) == document

    code, out = _run(capsys, "review", "2")
    assert code == 0
    assert json.loads(out)["ok"] is True

    uri = _run(capsys, "token-uri", "1")[1].strip()
    code, out = _run(capsys, "decode", uri)
    assert code == 0
    assert json.loads(out) == decode_metadata(uri)


def test_mint_without_entropy_uses_random_values(capsys) -> None:
    code, out = _run(capsys, "mint", "--requester", REQUESTER, "--count", "2")
    assert code == 0
    assert len(json.loads(out)) == 2


def test_token_uri_unknown_identifier_fails(capsys, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="yoyo.cli"):
        code, out = _run(capsys, "token-uri", "404")

    assert code == 1
    assert out == ""
    assert "no seed stored for identifier 404" in caplog.text


def test_admin_commands_persist_settings(capsys, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("YOYO_STORE_PATH", str(tmp_path / "store.json"))

    assert _run(capsys, "set-counts", "2,2,2,2,2,2,2")[0] == 0
    assert _run(capsys, "set-image-base-uri", "ipfs://next/")[0] == 0
    assert _run(capsys, "set-description", "Fresh crew")[0] == 0
    assert _run(capsys, "set-external-url", "https://yoyo.example")[0] == 0

    stored = json.loads((tmp_path / "store.json").read_text(encoding="utf-8"))
    assert stored["settings"]["trait_counts"] == [2] * 7
    assert stored["settings"]["image_base_uri"] == "ipfs://next/"
    assert stored["settings"]["description"] == "Fresh crew"
    assert stored["settings"]["external_url"] == "https://yoyo.example"

    _run(capsys, "mint", "--requester", REQUESTER, "--entropy", ENTROPY, "--timestamp", "5")
    code, out = _run(capsys, "token-uri", "1", "--decoded")
    assert code == 0
    assert json.loads(out)["image"] == "ipfs://next/1.png"


def test_set_counts_rejects_zero(capsys, caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="yoyo.cli"):
        code, _ = _run(capsys, "set-counts", "0,1,1,1,1,1,1")
    assert code == 1
    assert "Shoes" in caplog.text


def test_export_command_writes_files(capsys, tmp_path) -> None:
    _run(capsys, "mint", "--requester", REQUESTER, "--count", "3", "--entropy", ENTROPY, "--timestamp", "5")

    code, out = _run(capsys, "export", str(tmp_path / "output"))

    assert code == 0
    assert json.loads(out)["written"] == 3
    assert sorted(entry.name for entry in (tmp_path / "output").iterdir()) == ["1.json", "2.json", "3.json"]


def test_review_command_fails_for_bad_uri(capsys) -> None:
    code, out = _run(capsys, "review", "data:application/json;base64,e30=")
    assert code == 1
    assert json.loads(out)["ok"] is False


def test_render_command_rejects_empty_seed_entry() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["render", "1", "--seed", "0,,1,2,3,4,5,6"])
    assert excinfo.value.code == 2


def test_missing_name_table_file_fails_cleanly(capsys, caplog, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("YOYO_NAME_TABLE", str(tmp_path / "missing" / "table.json"))

    with caplog.at_level(logging.ERROR, logger="yoyo.cli"):
        code, _ = _run(capsys, "render", "1", "--seed", "0,0,0,0,0,0,0")

    assert code == 1
    assert "cannot read name table" in caplog.text


def test_store_file_holding_a_list_fails_cleanly(capsys, caplog, tmp_path, monkeypatch) -> None:
    store_file = tmp_path / "store.json"
    store_file.write_text("[]\n", encoding="utf-8")
    monkeypatch.setenv("YOYO_STORE_PATH", str(store_file))

    with caplog.at_level(logging.ERROR, logger="yoyo.cli"):
        code, _ = _run(capsys, "token-uri", "1")

    assert code == 1
    assert "JSON object" in caplog.text


def test_export_to_unwritable_location_fails_cleanly(capsys, caplog, tmp_path) -> None:
    _run(capsys, "mint", "--requester", REQUESTER, "--entropy", ENTROPY, "--timestamp", "1000")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory\n", encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="yoyo.cli"):
        code, _ = _run(capsys, "export", str(blocker / "out"))

    assert code == 1
    assert "export could not access" in caplog.text
