"""Tests for folio.config_loader — folio.yaml / folio.toml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from folio._errors import ConfigError
from folio.config_loader import (
    load_config,
    load_consumer_config,
    normalize_keys,
    read_config_file,
)
from folio.transform import PageTypeDefinition, transform
from tests.conftest import make_record

_YAML = """\
cacheFilePath: .cache/snapshot.json
liveUpdate: true
liveUpdateWsPort: 9200
liveUpdateWsClientPort: 443
commonProps:
  site:
    predicate: {modelName: config}
    single: true
pages:
  - predicate: {modelName: post}
    path: /posts/{slug}
    props:
      authors:
        predicate: {modelName: author}
  - predicate:
      all:
        - {modelName: page}
        - {field: draft, op: truthy}
    path: /drafts/{slug}
"""


class TestLoadConfig:
    """load_config — file + overrides into FolioConfig."""

    def test_no_file_gives_defaults(self, project: Path) -> None:
        config = load_config(project)
        assert config.root == project
        assert config.pages is None
        assert config.live_update is False

    def test_yaml_camel_case(self, project: Path) -> None:
        (project / "folio.yaml").write_text(_YAML)
        config = load_config(project)

        assert config.cache_path == project / ".cache" / "snapshot.json"
        assert config.live_update is True
        assert config.live_update_ws_port == 9200
        assert config.client_port == 443
        assert isinstance(config.pages, list)
        assert all(isinstance(p, PageTypeDefinition) for p in config.pages)

    def test_yaml_rules_drive_transform(self, project: Path) -> None:
        (project / "folio.yaml").write_text(_YAML)
        config = load_config(project)
        records = [
            make_record("config", title="T"),
            make_record("author", slug="ada"),
            make_record("post", slug="hi"),
            make_record("page", slug="wip", draft=True),
            make_record("page", slug="done"),
        ]

        snapshot = transform(records, common_props=config.common_props, pages=config.pages)
        assert snapshot.props["site"]["title"] == "T"
        assert snapshot.paths == ["/posts/hi", "/drafts/wip"]
        assert [a["slug"] for a in snapshot.pages[0]["authors"]] == ["ada"]

    def test_yml_extension(self, project: Path) -> None:
        (project / "folio.yml").write_text("live_update_ws_port: 9300\n")
        assert load_config(project).live_update_ws_port == 9300

    def test_toml(self, project: Path) -> None:
        (project / "folio.toml").write_text(
            '[folio]\ncacheFilePath = "snap.json"\nliveUpdateWsPort = 9400\n'
        )
        config = load_config(project)
        assert config.cache_path == project / "snap.json"
        assert config.live_update_ws_port == 9400

    def test_folio_section_in_yaml(self, project: Path) -> None:
        (project / "folio.yaml").write_text("folio:\n  liveUpdate: true\n")
        assert load_config(project).live_update is True

    def test_overrides_win(self, project: Path) -> None:
        (project / "folio.yaml").write_text("liveUpdateWsPort: 9200\n")
        config = load_config(project, live_update_ws_port=9999, liveUpdate=False)
        assert config.live_update_ws_port == 9999
        assert config.live_update is False

    def test_accepts_string_root(self, project: Path) -> None:
        assert load_config(str(project)).root == project

    def test_custom_pages_function(self, project: Path) -> None:
        (project / "site_rules.py").write_text(
            "def pages(records):\n"
            "    return [{'path': '/{slug}', 'page': r} for r in records]\n"
        )
        (project / "folio.yaml").write_text("pages: site_rules:pages\n")
        config = load_config(project)
        snapshot = transform([{"slug": "a"}, {"slug": ""}], pages=config.pages)
        assert snapshot.paths == ["/a"]


class TestConfigErrors:
    """Malformed config files raise ConfigError."""

    def test_unknown_option(self, project: Path) -> None:
        (project / "folio.yaml").write_text("cachePath: x.json\n")
        with pytest.raises(ConfigError, match="cachePath"):
            load_config(project)

    def test_invalid_yaml(self, project: Path) -> None:
        (project / "folio.yaml").write_text("pages: [unclosed\n")
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(project)

    def test_invalid_toml(self, project: Path) -> None:
        (project / "folio.toml").write_text("= nope\n")
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(project)

    def test_top_level_not_mapping(self, project: Path) -> None:
        (project / "folio.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(project)

    def test_bad_rule(self, project: Path) -> None:
        (project / "folio.yaml").write_text("pages:\n  - path: /{slug}\n")
        with pytest.raises(ConfigError, match="predicate"):
            load_config(project)


class TestHelpers:
    """normalize_keys / read_config_file."""

    def test_normalize_keys(self) -> None:
        assert normalize_keys({"commonProps": 1, "pages": 2}) == {"common_props": 1, "pages": 2}

    def test_read_config_file_missing(self, project: Path) -> None:
        assert read_config_file(project) == {}

    def test_yaml_preferred_over_toml(self, project: Path) -> None:
        (project / "folio.yaml").write_text("liveUpdateWsPort: 1\n")
        (project / "folio.toml").write_text("liveUpdateWsPort = 2\n")
        assert read_config_file(project) == {"live_update_ws_port": 1}


class TestLoadConsumerConfig:
    """load_consumer_config — cache settings only, rules untouched."""

    def test_rules_left_out(self, project: Path) -> None:
        (project / "folio.yaml").write_text(_YAML)
        config = load_consumer_config(project)
        assert config.cache_path == project / ".cache" / "snapshot.json"
        assert config.cache_max_retries == 10
        assert config.pages is None
        assert config.common_props is None

    def test_malformed_rules_not_parsed(self, project: Path) -> None:
        (project / "folio.yaml").write_text("pages:\n  - path: /{slug}\n")
        assert load_consumer_config(project).pages is None

    def test_unknown_option_still_rejected(self, project: Path) -> None:
        (project / "folio.yaml").write_text("cachePath: x.json\n")
        with pytest.raises(ConfigError, match="cachePath"):
            load_consumer_config(project)

    def test_overrides(self, project: Path) -> None:
        config = load_consumer_config(project, cacheMaxRetries=0)
        assert config.cache_max_retries == 0
