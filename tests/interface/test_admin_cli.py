import asyncio
import json

import pytest

from postvault.config.compose import Container
from postvault.config.settings import AppSettings
from postvault.infrastructure.telemetry.otel_adapter import NoopTelemetry
from postvault.interface.cli import admin


@pytest.fixture
def container(monkeypatch, metadata, blobs, clock):
    c = Container(AppSettings(), metadata=metadata, blobs=blobs, clock=clock, telemetry=NoopTelemetry())
    monkeypatch.setattr(admin, "build_container", lambda: c)
    return c


@pytest.fixture
def body_file(tmp_path):
    path = tmp_path / "post.md"
    path.write_text("## Hello\n\nbody", encoding="utf-8")
    return str(path)


def test_create_get_list_delete(container, body_file, capsys):
    assert admin.main(["create", "hello", "--title", "Hi", "--excerpt", "E", "--content-file", body_file]) == 0
    assert "✓ Created 'hello'" in capsys.readouterr().out

    assert admin.main(["get", "hello"]) == 0
    out = capsys.readouterr().out
    assert '"contentKey": "posts/hello.md"' in out
    assert out.rstrip().endswith("body")

    assert admin.main(["list", "--published"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert [r["slug"] for r in rows] == ["hello"]

    assert admin.main(["delete", "hello"]) == 0
    assert admin.main(["delete", "hello"]) == 1
    assert "✗ Failed: not_found" in capsys.readouterr().out


def test_create_duplicate_fails(container, body_file, capsys):
    args = ["create", "dup", "--title", "T", "--excerpt", "E", "--content-file", body_file]
    assert admin.main(args) == 0
    assert admin.main(args) == 1
    assert "slug_exists" in capsys.readouterr().out


def test_update_status_hides_from_published_get(container, body_file, capsys):
    admin.main(["create", "p", "--title", "T", "--excerpt", "E", "--content-file", body_file])

    assert admin.main(["update", "p", "--status", "draft"]) == 0
    assert admin.main(["get", "p", "--published"]) == 1
    assert "not found" in capsys.readouterr().out


def test_sweep_dry_run_lists_orphans(container, blobs, clock, capsys):
    asyncio.run(blobs.put("posts/stray.md", "x", "text/markdown; charset=utf-8"))
    clock.advance(3600)

    assert admin.main(["sweep", "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "1 orphaned" in out
    assert "would delete posts/stray.md" in out
    assert "posts/stray.md" in blobs


def test_unknown_status_is_rejected_by_parser(container):
    with pytest.raises(SystemExit):
        admin.main(["update", "p", "--status", "archived"])
