from __future__ import annotations

import io
import json

from sources_list.cli.main import main


def test_version_json_has_expected_fields(tmp_path) -> None:
    out = io.StringIO()
    err = io.StringIO()

    rc = main(
        ["--config", str(tmp_path / "missing.toml"), "version", "--json"],
        stdout=out,
        stderr=err,
    )

    assert rc == 0
    assert err.getvalue() == ""
    payload = json.loads(out.getvalue())
    assert payload["cli"] == "sources-list"
    assert isinstance(payload["version"], str)


def test_invalid_config_returns_error(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('local_repository_layout = "ivy"\n', encoding="utf-8")
    out = io.StringIO()
    err = io.StringIO()

    rc = main(["--config", str(config_path), "version"], stdout=out, stderr=err)

    assert rc == 1
    assert "config error" in err.getvalue()
